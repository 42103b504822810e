from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from ..core.enums import LeaveType
from .model import LeaveEntitlement


class EntitlementRepository(Protocol):
    def get(self, user_id: int, year: int, *, for_update: bool = False) -> Optional[LeaveEntitlement]:
        """``for_update`` locks the row until the surrounding transaction ends."""

        raise NotImplementedError

    def upsert(self, *, user_id: int, year: int, casual: Decimal, earned: Decimal, comp_off: Decimal) -> None:
        """Insert or overwrite the absolute balances for (user, year)."""

        raise NotImplementedError

    def create(self, *, user_id: int, year: int, casual: Decimal, earned: Decimal, comp_off: Decimal) -> int:
        raise NotImplementedError

    def adjust(self, *, entitlement_id: int, leave_type: LeaveType, delta: Decimal) -> bool:
        """Add ``delta`` (possibly negative) to one balance."""

        raise NotImplementedError
