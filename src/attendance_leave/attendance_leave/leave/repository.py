from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus, LeaveType
from .model import LeaveRequest


class LeaveRequestRepository(Protocol):
    def get_by_id(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        total_days: Decimal,
        reason: str,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def has_overlap(self, user_id: int, start_date: date, end_date: date) -> bool:
        """True if a request that is neither rejected nor cancelled overlaps the range."""

        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: ApprovalStatus,
        decided_by: int,
        decided_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Only succeeds while the request is still pending."""

        raise NotImplementedError

    def cancel(self, request_id: int) -> bool:
        """Only succeeds while the request is still pending."""

        raise NotImplementedError

    def pending_days_by_type(self, user_id: int, year: int) -> Dict[LeaveType, Decimal]:
        """Sum of pending request days per type, for requests starting in ``year``."""

        raise NotImplementedError

    def list_for_users(
        self,
        *,
        user_ids: Optional[Sequence[int]] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 500,
        oldest_first: bool = False,
    ) -> Sequence[LeaveRequest]:
        """``user_ids=None`` means every user. A date range keeps overlapping requests.

        Ordered by creation time, newest first unless ``oldest_first``.
        """

        raise NotImplementedError

    def list_upcoming(self, user_id: int, today: date, limit: int = 5) -> Sequence[LeaveRequest]:
        """Pending or approved requests starting today or later, earliest first."""

        raise NotImplementedError
