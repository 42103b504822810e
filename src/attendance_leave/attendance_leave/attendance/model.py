from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..core.enums import ApprovalStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (user, date).

    ``is_weekend``/``is_public_holiday`` are computed when the record is
    created and never recomputed.
    """

    attendance_id: int
    user_id: int
    work_date: date
    login_time: datetime
    logout_time: Optional[datetime]
    is_weekend: bool
    is_public_holiday: bool
    status: ApprovalStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.logout_time is None

    @property
    def work_duration(self) -> Optional[timedelta]:
        if self.logout_time is None:
            return None
        return self.logout_time - self.login_time
