from __future__ import annotations

from datetime import date

import pytest

from src.attendance_leave.attendance_leave.core.exceptions import ConflictError, NotFoundError, ValidationError


def test_weekend_classification():
    from src.attendance_leave.attendance_leave.holidays.service import HolidayCalendar

    assert HolidayCalendar.is_weekend(date(2025, 3, 8))  # Saturday
    assert HolidayCalendar.is_weekend(date(2025, 3, 9))  # Sunday
    assert not HolidayCalendar.is_weekend(date(2025, 3, 10))


def test_create_derives_year_and_lists_by_date(world):
    calendar = world.container.calendar
    calendar.create(holiday_date="2025-12-25", name="Christmas Day")
    calendar.create(holiday_date=date(2025, 1, 1), name="New Year's Day", description="  ")

    holidays = calendar.list_for_year(2025)
    assert [h.name for h in holidays] == ["New Year's Day", "Christmas Day"]
    assert all(h.year == 2025 for h in holidays)
    assert holidays[0].description is None


def test_duplicate_date_conflicts_even_when_inactive(world):
    calendar = world.container.calendar
    holiday = calendar.create(holiday_date="2025-05-01", name="Labour Day")
    calendar.deactivate(holiday.holiday_id)

    with pytest.raises(ConflictError):
        calendar.create(holiday_date="2025-05-01", name="Labour Day again")


def test_deactivated_holiday_is_not_a_holiday(world):
    calendar = world.container.calendar
    holiday = calendar.create(holiday_date="2025-05-01", name="Labour Day")
    assert calendar.is_public_holiday(date(2025, 5, 1))

    calendar.deactivate(holiday.holiday_id)

    assert not calendar.is_public_holiday(date(2025, 5, 1))
    assert calendar.list_for_year(2025) == []


def test_deactivate_unknown_holiday(world):
    with pytest.raises(NotFoundError):
        world.container.calendar.deactivate(42)


@pytest.mark.parametrize("value", ["2025/05/01", "", "not-a-date", 20250501, None])
def test_create_rejects_bad_dates(world, value):
    with pytest.raises(ValidationError):
        world.container.calendar.create(holiday_date=value, name="Bad")


@pytest.mark.parametrize("fields", [{"name": 2025}, {"name": "Labour Day", "description": 1}])
def test_create_rejects_non_text_name_or_description(world, fields):
    with pytest.raises(ValidationError):
        world.container.calendar.create(holiday_date="2025-05-01", **fields)
