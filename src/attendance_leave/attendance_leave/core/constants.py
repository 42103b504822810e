"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_COMP_OFF_ACCRUAL_DAYS = Decimal("0.5")
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LIST_LIMIT = 500
DEFAULT_UPCOMING_LEAVES = 5
MIN_PASSWORD_LENGTH = 6

# date.weekday(): Monday == 0
WEEKEND_WEEKDAYS = frozenset({5, 6})
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
DEFAULT_WEEKLY_OFF_DAYS = ("Saturday", "Sunday")
