from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class PublicHoliday:
    holiday_id: int
    holiday_date: date
    name: str
    description: Optional[str]
    year: int
    is_active: bool = True


@dataclass(frozen=True)
class DayClassification:
    """Weekend/holiday flags frozen onto an attendance record at creation."""

    is_weekend: bool
    is_public_holiday: bool

    @property
    def earns_comp_off(self) -> bool:
        return self.is_weekend or self.is_public_holiday
