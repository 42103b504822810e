from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence, Union

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_text, require_non_empty
from ..core.constants import WEEKEND_WEEKDAYS
from ..core.exceptions import ConflictError, NotFoundError
from .model import DayClassification, PublicHoliday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


class HolidayCalendar:
    """Active (date -> holiday) entries plus weekend classification."""

    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    @staticmethod
    def is_weekend(day: date) -> bool:
        return day.weekday() in WEEKEND_WEEKDAYS

    def is_public_holiday(self, day: date) -> bool:
        # Deactivated holidays no longer count.
        return self._holidays.exists_active_on(day)

    def classify(self, day: date) -> DayClassification:
        return DayClassification(is_weekend=self.is_weekend(day), is_public_holiday=self.is_public_holiday(day))

    def create(self, *, holiday_date: Union[str, date], name: str, description: Optional[str] = None) -> PublicHoliday:
        day = parse_iso_date(holiday_date, "Holiday date")
        name = require_non_empty(name, "Holiday name")
        description = optional_text(description, "Description")

        if self._holidays.get_by_date(day):
            raise ConflictError("A public holiday already exists for this date")

        holiday_id = self._holidays.create(holiday_date=day, name=name, description=description)
        logger.info("Created public holiday %s on %s", name, day)
        return PublicHoliday(
            holiday_id=holiday_id,
            holiday_date=day,
            name=name,
            description=description,
            year=day.year,
            is_active=True,
        )

    def list_for_year(self, year: int) -> Sequence[PublicHoliday]:
        return self._holidays.list_active_for_year(int(year))

    def deactivate(self, holiday_id: int) -> None:
        if not self._holidays.get_by_id(int(holiday_id)):
            raise NotFoundError("Public holiday not found")
        self._holidays.set_active(int(holiday_id), is_active=False)
        logger.info("Deactivated public holiday %s", holiday_id)
