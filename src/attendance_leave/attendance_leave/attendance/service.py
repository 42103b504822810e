from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, Sequence, Union

from ..approvals.authority import Actor, ApprovalAuthority
from ..audit.model import audit_value
from ..audit.repository import AuditLog
from ..common.datetime_utils import now_local, parse_clock_time, parse_iso_date, parse_optional_clock_time
from ..common.validators import optional_text
from ..core.constants import DEFAULT_COMP_OFF_ACCRUAL_DAYS, DEFAULT_HISTORY_LIMIT, DEFAULT_LIST_LIMIT
from ..core.enums import ApprovalStatus
from ..core.exceptions import (
    AlreadyCompletedError,
    AlreadyDecidedError,
    AlreadyLoggedInError,
    AuthorizationError,
    ConflictError,
    NoActiveLoginError,
    NotFoundError,
    ValidationError,
)
from ..database.transaction import TransactionManager, begin
from ..entitlements.service import EntitlementLedger
from ..holidays.service import HolidayCalendar
from ..users.repository import UserRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Daily login/logout records and their approval.

    Records are created ``Pending`` on login and decided once by the owner's
    manager (or an administrator). Backdated entries are created ``Approved``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        calendar: HolidayCalendar,
        ledger: EntitlementLedger,
        authority: ApprovalAuthority,
        *,
        tx: Optional[TransactionManager] = None,
        audit: Optional[AuditLog] = None,
        comp_off_days: Decimal = DEFAULT_COMP_OFF_ACCRUAL_DAYS,
    ):
        self._attendance = attendance
        self._users = users
        self._calendar = calendar
        self._ledger = ledger
        self._authority = authority
        self._tx = tx
        self._audit = audit
        self._comp_off_days = Decimal(comp_off_days)

    def login(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        with begin(self._tx):
            if not self._users.get_by_id(int(user_id)):
                raise NotFoundError("User not found")

            existing = self._attendance.get_for_user_and_date(int(user_id), today, for_update=True)
            if existing:
                if existing.is_open:
                    raise AlreadyLoggedInError("You have already logged in today")
                raise AlreadyCompletedError("You have already completed attendance for today")

            day = self._calendar.classify(today)
            attendance_id = self._attendance.create(
                user_id=int(user_id),
                work_date=today,
                login_time=now,
                logout_time=None,
                is_weekend=day.is_weekend,
                is_public_holiday=day.is_public_holiday,
                status=ApprovalStatus.PENDING,
            )

        logger.info("User %s logged in at %s (attendance %s)", user_id, now, attendance_id)
        return AttendanceRecord(
            attendance_id=attendance_id,
            user_id=int(user_id),
            work_date=today,
            login_time=now,
            logout_time=None,
            is_weekend=day.is_weekend,
            is_public_holiday=day.is_public_holiday,
            status=ApprovalStatus.PENDING,
        )

    def logout(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        with begin(self._tx):
            record = self._attendance.get_for_user_and_date(int(user_id), today, for_update=True)
            if not record or not record.is_open:
                raise NoActiveLoginError("No active login found for today")

            # Conditional update; a concurrent logout that got here first wins.
            if not self._attendance.set_logout(attendance_id=record.attendance_id, logout_time=now):
                raise NoActiveLoginError("No active login found for today")

            if record.is_weekend or record.is_public_holiday:
                self._ledger.accrue_comp_off(
                    user_id=int(user_id),
                    year=now.year,
                    amount=self._comp_off_days,
                    reason=f"Worked on {'public holiday' if record.is_public_holiday else 'weekend'} {record.work_date}",
                )

        logger.info("User %s logged out at %s (attendance %s)", user_id, now, record.attendance_id)
        return AttendanceRecord(
            attendance_id=record.attendance_id,
            user_id=record.user_id,
            work_date=record.work_date,
            login_time=record.login_time,
            logout_time=now,
            is_weekend=record.is_weekend,
            is_public_holiday=record.is_public_holiday,
            status=record.status,
            approved_by=record.approved_by,
            approved_at=record.approved_at,
        )

    def approve(
        self, actor: Actor, attendance_id: int, *, admin_path: bool = False, now: Optional[datetime] = None
    ) -> AttendanceRecord:
        return self._decide(actor, attendance_id, ApprovalStatus.APPROVED, admin_path=admin_path, now=now)

    def reject(
        self,
        actor: Actor,
        attendance_id: int,
        *,
        reason: Optional[str] = None,
        admin_path: bool = False,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        return self._decide(
            actor, attendance_id, ApprovalStatus.REJECTED, reason=reason, admin_path=admin_path, now=now
        )

    def _decide(
        self,
        actor: Actor,
        attendance_id: int,
        status: ApprovalStatus,
        *,
        reason: Optional[str] = None,
        admin_path: bool = False,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        reason = optional_text(reason, "Reason")

        with begin(self._tx):
            record = self._attendance.get_by_id(int(attendance_id), for_update=True)
            if not record:
                raise NotFoundError("Attendance record not found")
            if record.status != ApprovalStatus.PENDING:
                raise AlreadyDecidedError("Attendance record has already been processed")
            self._authority.ensure_can_act_on(
                actor,
                record.user_id,
                admin_path=admin_path,
                message="You are not authorized to approve this attendance",
            )

            if not self._attendance.decide(
                attendance_id=record.attendance_id, status=status, decided_by=actor.user_id, decided_at=now
            ):
                raise AlreadyDecidedError("Attendance record has already been processed")

            if self._audit is not None:
                self._audit.append(
                    user_id=actor.user_id,
                    action=f"Attendance {status.value}",
                    entity_type="Attendance",
                    entity_id=str(record.attendance_id),
                    old_value=audit_value(status=record.status.value),
                    new_value=audit_value(status=status.value, reason=reason),
                )

        logger.info("Attendance %s %s by user %s", record.attendance_id, status.value.lower(), actor.user_id)
        return AttendanceRecord(
            attendance_id=record.attendance_id,
            user_id=record.user_id,
            work_date=record.work_date,
            login_time=record.login_time,
            logout_time=record.logout_time,
            is_weekend=record.is_weekend,
            is_public_holiday=record.is_public_holiday,
            status=status,
            approved_by=actor.user_id,
            approved_at=now,
        )

    def log_past_attendance(
        self,
        actor: Actor,
        *,
        employee_id: int,
        work_date: Union[str, date],
        login_time: Union[str, time],
        logout_time: Optional[Union[str, time]] = None,
        admin_path: bool = False,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Backdated entry by a manager (direct reports, past dates) or an administrator."""

        now = now or now_local()
        day = parse_iso_date(work_date, "Date")
        login_clock = parse_clock_time(login_time, "Login time")
        logout_clock = parse_optional_clock_time(logout_time, "Logout time")

        login_at = datetime.combine(day, login_clock)
        logout_at = datetime.combine(day, logout_clock) if logout_clock else None
        if logout_at is not None and logout_at <= login_at:
            raise ValidationError("Logout time must be after login time")

        with begin(self._tx):
            employee = self._users.get_by_id(int(employee_id))
            if not employee or not employee.is_active:
                raise NotFoundError("Employee not found or inactive")
            if not self._authority.can_act_on(actor, employee.user_id, admin_path=admin_path):
                raise AuthorizationError("Employee not found or not a subordinate")
            self._authority.ensure_can_backdate(actor, day, now.date(), admin_path=admin_path)

            if self._attendance.get_for_user_and_date(employee.user_id, day, for_update=True):
                raise ConflictError("Attendance already exists for this date")

            classification = self._calendar.classify(day)
            attendance_id = self._attendance.create(
                user_id=employee.user_id,
                work_date=day,
                login_time=login_at,
                logout_time=logout_at,
                is_weekend=classification.is_weekend,
                is_public_holiday=classification.is_public_holiday,
                status=ApprovalStatus.APPROVED,
                approved_by=actor.user_id,
                approved_at=now,
            )

            if self._audit is not None:
                self._audit.append(
                    user_id=actor.user_id,
                    action="Past Attendance Logged",
                    entity_type="Attendance",
                    entity_id=str(attendance_id),
                    new_value=audit_value(
                        employee_id=employee.user_id,
                        work_date=day,
                        login_time=login_at,
                        logout_time=logout_at,
                        logged_by_role=actor.role.value,
                    ),
                )

        logger.info(
            "%s %s logged past attendance for employee %s on %s",
            actor.role.value, actor.user_id, employee.user_id, day,
        )
        return AttendanceRecord(
            attendance_id=attendance_id,
            user_id=employee.user_id,
            work_date=day,
            login_time=login_at,
            logout_time=logout_at,
            is_weekend=classification.is_weekend,
            is_public_holiday=classification.is_public_holiday,
            status=ApprovalStatus.APPROVED,
            approved_by=actor.user_id,
            approved_at=now,
        )

    def get_today(self, user_id: int, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        now = now or now_local()
        return self._attendance.get_for_user_and_date(int(user_id), now.date())

    def history(
        self,
        user_id: int,
        *,
        start_date: Optional[Union[str, date]] = None,
        end_date: Optional[Union[str, date]] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        start = parse_iso_date(start_date, "Start date") if start_date else None
        end = parse_iso_date(end_date, "End date") if end_date else None
        return self._attendance.list_for_users(user_ids=[int(user_id)], start_date=start, end_date=end, limit=limit)

    def pending_for(self, actor: Actor, *, admin_path: bool = False) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_users(
            user_ids=self._scope(actor, admin_path), status=ApprovalStatus.PENDING, limit=DEFAULT_LIST_LIMIT
        )

    def team_history(
        self,
        actor: Actor,
        *,
        start_date: Optional[Union[str, date]] = None,
        end_date: Optional[Union[str, date]] = None,
        admin_path: bool = False,
    ) -> Sequence[AttendanceRecord]:
        start = parse_iso_date(start_date, "Start date") if start_date else None
        end = parse_iso_date(end_date, "End date") if end_date else None
        if start and end and end < start:
            raise ValidationError("End date must be on or after start date")
        return self._attendance.list_for_users(
            user_ids=self._scope(actor, admin_path), start_date=start, end_date=end, limit=DEFAULT_LIST_LIMIT
        )

    def _scope(self, actor: Actor, admin_path: bool) -> Optional[Sequence[int]]:
        """User ids visible to ``actor``; ``None`` means everyone."""

        if self._authority.bypasses_hierarchy(actor, admin_path=admin_path):
            return None
        if not (actor.is_manager or actor.is_admin):
            raise AuthorizationError("Only managers and administrators can view team attendance")
        return [u.user_id for u in self._users.list_direct_reports(actor.user_id)]
