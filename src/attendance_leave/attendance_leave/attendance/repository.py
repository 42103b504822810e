from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        login_time: datetime,
        logout_time: Optional[datetime],
        is_weekend: bool,
        is_public_holiday: bool,
        status: ApprovalStatus,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> int:
        """Insert a record; a second record for the same (user, date) is a conflict."""

        raise NotImplementedError

    def set_logout(self, *, attendance_id: int, logout_time: datetime) -> bool:
        """Only succeeds while the record has no logout yet."""

        raise NotImplementedError

    def decide(self, *, attendance_id: int, status: ApprovalStatus, decided_by: int, decided_at: datetime) -> bool:
        """Only succeeds while the record is still pending."""

        raise NotImplementedError

    def list_for_users(
        self,
        *,
        user_ids: Optional[Sequence[int]] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[AttendanceRecord]:
        """``user_ids=None`` means every user. Newest dates first."""

        raise NotImplementedError
