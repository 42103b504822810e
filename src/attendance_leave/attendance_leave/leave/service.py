from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..approvals.authority import Actor, ApprovalAuthority
from ..audit.model import audit_value
from ..audit.repository import AuditLog
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import ApprovalStatus, LeaveType
from ..core.exceptions import (
    AlreadyDecidedError,
    AuthorizationError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NoEntitlementError,
    NotFoundError,
    NotOwnerError,
    OverlappingRequestError,
    ValidationError,
)
from ..database.transaction import TransactionManager, begin
from ..entitlements.model import LeaveBalance
from ..entitlements.service import EntitlementLedger
from ..users.repository import UserRepository
from .model import LeaveRequest, count_leave_days
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)


def parse_leave_type(value: Union[str, LeaveType]) -> LeaveType:
    """Accept the enum, its value (``CasualLeave``) or its name (``CASUAL_LEAVE``)."""

    if isinstance(value, LeaveType):
        return value
    raw = (value or "").strip() if isinstance(value, str) else value
    try:
        return LeaveType(raw)
    except ValueError:
        pass
    try:
        return LeaveType[str(raw).upper()]
    except KeyError:
        raise ValidationError("Invalid leave type")


class LeaveService:
    """Leave request workflow.

    Submission only checks the balance; the ledger is debited when the
    request is approved.
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        ledger: EntitlementLedger,
        users: UserRepository,
        authority: ApprovalAuthority,
        *,
        tx: Optional[TransactionManager] = None,
        audit: Optional[AuditLog] = None,
    ):
        self._requests = requests
        self._ledger = ledger
        self._users = users
        self._authority = authority
        self._tx = tx
        self._audit = audit

    def create(
        self,
        user_id: int,
        *,
        leave_type: Union[str, LeaveType],
        start_date: Union[str, date],
        end_date: Union[str, date],
        reason: str,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = now or now_local()
        kind = parse_leave_type(leave_type)
        start = parse_iso_date(start_date, "Start date")
        end = parse_iso_date(end_date, "End date")
        if end < start:
            raise ValidationError("End date cannot be before start date")
        reason = require_non_empty(reason, "Reason")
        total_days = count_leave_days(start, end)

        with begin(self._tx):
            if not self._users.get_by_id(int(user_id)):
                raise NotFoundError("User not found")

            entitlement = self._ledger.get_entitlement(int(user_id), start.year, for_update=True)
            if entitlement is None:
                raise NoEntitlementError(
                    f"No leave entitlement found for {start.year}. Please contact admin."
                )
            available = entitlement.balance_for(kind)
            if available < total_days:
                raise InsufficientBalanceError(
                    f"Insufficient {kind.value} balance. Available: {available}, Required: {total_days}"
                )

            if self._requests.has_overlap(int(user_id), start, end):
                raise OverlappingRequestError("You already have a leave request for overlapping dates")

            request_id = self._requests.create(
                user_id=int(user_id),
                leave_type=kind,
                start_date=start,
                end_date=end,
                total_days=total_days,
                reason=reason,
                created_at=now,
            )

        logger.info("User %s created %s request %s from %s to %s", user_id, kind.value, request_id, start, end)
        return LeaveRequest(
            request_id=request_id,
            user_id=int(user_id),
            leave_type=kind,
            start_date=start,
            end_date=end,
            total_days=total_days,
            reason=reason,
            status=ApprovalStatus.PENDING,
            created_at=now,
        )

    def approve_or_reject(
        self,
        actor: Actor,
        request_id: int,
        *,
        approved: bool,
        rejection_reason: Optional[str] = None,
        admin_path: bool = False,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = now or now_local()
        status = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
        rejection_reason = None if approved else optional_text(rejection_reason, "Rejection reason")

        with begin(self._tx):
            req = self._requests.get_by_id(int(request_id), for_update=True)
            if not req:
                raise NotFoundError("Leave request not found")
            if req.status != ApprovalStatus.PENDING:
                raise AlreadyDecidedError(f"Leave request is already {req.status.value}")
            self._authority.ensure_can_act_on(
                actor,
                req.user_id,
                admin_path=admin_path,
                message="You are not authorized to approve this leave request",
            )

            if approved:
                entitlement = self._ledger.get_entitlement(req.user_id, req.start_date.year, for_update=True)
                if entitlement is None:
                    raise NotFoundError("Leave entitlement not found")
                if entitlement.balance_for(req.leave_type) < req.total_days:
                    raise InsufficientBalanceError(
                        f"Insufficient {req.leave_type.value} balance. "
                        f"Available: {entitlement.balance_for(req.leave_type)}, Required: {req.total_days}"
                    )
                self._ledger.deduct(
                    user_id=req.user_id,
                    year=req.start_date.year,
                    leave_type=req.leave_type,
                    days=req.total_days,
                    reference=f"LeaveRequest {req.request_id}",
                )

            if not self._requests.decide(
                request_id=req.request_id,
                status=status,
                decided_by=actor.user_id,
                decided_at=now,
                rejection_reason=rejection_reason,
            ):
                raise AlreadyDecidedError("Leave request has already been processed")

            if self._audit is not None:
                self._audit.append(
                    user_id=actor.user_id,
                    action=f"Leave Request {status.value}",
                    entity_type="LeaveRequest",
                    entity_id=str(req.request_id),
                    old_value=audit_value(status=req.status.value),
                    new_value=audit_value(status=status.value, rejection_reason=rejection_reason),
                )

        logger.info("Leave request %s %s by user %s", req.request_id, status.value.lower(), actor.user_id)
        return LeaveRequest(
            request_id=req.request_id,
            user_id=req.user_id,
            leave_type=req.leave_type,
            start_date=req.start_date,
            end_date=req.end_date,
            total_days=req.total_days,
            reason=req.reason,
            status=status,
            created_at=req.created_at,
            approved_by=actor.user_id,
            approved_at=now,
            rejection_reason=rejection_reason,
        )

    def cancel(self, user_id: int, request_id: int) -> LeaveRequest:
        with begin(self._tx):
            req = self._requests.get_by_id(int(request_id), for_update=True)
            if not req:
                raise NotFoundError("Leave request not found")
            if req.user_id != int(user_id):
                raise NotOwnerError("You are not authorized to cancel this leave request")
            if req.status != ApprovalStatus.PENDING or not self._requests.cancel(req.request_id):
                raise InvalidTransitionError(f"Cannot cancel leave request. Current status: {req.status.value}")

        logger.info("Leave request %s cancelled by user %s", req.request_id, user_id)
        return LeaveRequest(
            request_id=req.request_id,
            user_id=req.user_id,
            leave_type=req.leave_type,
            start_date=req.start_date,
            end_date=req.end_date,
            total_days=req.total_days,
            reason=req.reason,
            status=ApprovalStatus.CANCELLED,
            created_at=req.created_at,
        )

    def get_available_balance(self, user_id: int, *, now: Optional[datetime] = None) -> Optional[LeaveBalance]:
        """Current-year balance minus days held by pending requests."""

        now = now or now_local()
        balance = self._ledger.get_balance(int(user_id), now.year)
        if balance is None:
            return None

        pending = self._requests.pending_days_by_type(int(user_id), now.year)
        return LeaveBalance(
            year=balance.year,
            casual=balance.casual - pending.get(LeaveType.CASUAL_LEAVE, 0),
            earned=balance.earned - pending.get(LeaveType.EARNED_LEAVE, 0),
            comp_off=balance.comp_off - pending.get(LeaveType.COMPENSATORY_OFF, 0),
        )

    def my_requests(self, user_id: int) -> Sequence[LeaveRequest]:
        return self._requests.list_for_users(user_ids=[int(user_id)], limit=DEFAULT_LIST_LIMIT)

    def pending_for(self, actor: Actor, *, admin_path: bool = False) -> Sequence[LeaveRequest]:
        return self._requests.list_for_users(
            user_ids=self._scope(actor, admin_path),
            status=ApprovalStatus.PENDING,
            limit=DEFAULT_LIST_LIMIT,
            oldest_first=True,
        )

    def team_history(
        self,
        actor: Actor,
        *,
        start_date: Optional[Union[str, date]] = None,
        end_date: Optional[Union[str, date]] = None,
        admin_path: bool = False,
    ) -> Sequence[LeaveRequest]:
        start = parse_iso_date(start_date, "Start date") if start_date else None
        end = parse_iso_date(end_date, "End date") if end_date else None
        if start and end and end < start:
            raise ValidationError("End date must be on or after start date")
        return self._requests.list_for_users(
            user_ids=self._scope(actor, admin_path), start_date=start, end_date=end, limit=DEFAULT_LIST_LIMIT
        )

    def upcoming_for(self, user_id: int, *, today: date, limit: int) -> Sequence[LeaveRequest]:
        return self._requests.list_upcoming(int(user_id), today, limit)

    def _scope(self, actor: Actor, admin_path: bool) -> Optional[Sequence[int]]:
        if self._authority.bypasses_hierarchy(actor, admin_path=admin_path):
            return None
        if not (actor.is_manager or actor.is_admin):
            raise AuthorizationError("Only managers and administrators can view team leave")
        return [u.user_id for u in self._users.list_direct_reports(actor.user_id)]
