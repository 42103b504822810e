from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import PublicHoliday


class HolidayRepository(Protocol):
    def get_by_id(self, holiday_id: int) -> Optional[PublicHoliday]:
        raise NotImplementedError

    def get_by_date(self, holiday_date: date) -> Optional[PublicHoliday]:
        """Return the holiday on that date whether active or not."""

        raise NotImplementedError

    def exists_active_on(self, holiday_date: date) -> bool:
        raise NotImplementedError

    def create(self, *, holiday_date: date, name: str, description: Optional[str]) -> int:
        raise NotImplementedError

    def list_active_for_year(self, year: int) -> Sequence[PublicHoliday]:
        raise NotImplementedError

    def set_active(self, holiday_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError
