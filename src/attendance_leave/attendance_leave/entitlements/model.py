from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..core.enums import LeaveType


@dataclass(frozen=True)
class LeaveEntitlement:
    """Ledger row: one per (user, calendar year)."""

    entitlement_id: int
    user_id: int
    year: int
    casual: Decimal
    earned: Decimal
    comp_off: Decimal

    def balance_for(self, leave_type: LeaveType) -> Decimal:
        return {
            LeaveType.CASUAL_LEAVE: self.casual,
            LeaveType.EARNED_LEAVE: self.earned,
            LeaveType.COMPENSATORY_OFF: self.comp_off,
        }[leave_type]


@dataclass(frozen=True)
class LeaveBalance:
    """Read model returned to callers (ledger or available balance)."""

    year: int
    casual: Decimal
    earned: Decimal
    comp_off: Decimal

    @classmethod
    def from_entitlement(cls, e: LeaveEntitlement) -> "LeaveBalance":
        return cls(year=e.year, casual=e.casual, earned=e.earned, comp_off=e.comp_off)
