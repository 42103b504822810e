from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class AuditEntry:
    """Append-only trail entry for balance-touching and backdating mutations."""

    audit_id: int
    user_id: Optional[int]
    action: str
    entity_type: str
    entity_id: str
    old_value: Optional[str]
    new_value: Optional[str]
    created_at: datetime


def audit_value(**values: object) -> str:
    """Serialize a before/after snapshot for ``old_value``/``new_value``."""

    return json.dumps(values, default=str, sort_keys=True)
