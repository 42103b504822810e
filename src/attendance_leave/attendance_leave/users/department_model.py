from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.constants import DEFAULT_WEEKLY_OFF_DAYS


@dataclass(frozen=True)
class Department:
    dept_id: int
    name: str
    description: Optional[str] = None
    weekly_off_days: Tuple[str, ...] = field(default=DEFAULT_WEEKLY_OFF_DAYS)
    is_active: bool = True
