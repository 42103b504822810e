from __future__ import annotations

from typing import Optional, Protocol


class AuditLog(Protocol):
    """External sink for audit entries.

    Called inside the same transaction as the mutation it describes.
    """

    def append(
        self,
        *,
        user_id: Optional[int],
        action: str,
        entity_type: str,
        entity_id: str,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
    ) -> None:
        raise NotImplementedError
