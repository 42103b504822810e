from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .approvals.authority import ApprovalAuthority, ApprovalPolicy
from .approvals.team import TeamOverview
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditLog
from .audit.repository import AuditLog
from .core.constants import DEFAULT_COMP_OFF_ACCRUAL_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .database.transaction import TransactionManager
from .entitlements.mysql_entitlement_repository import MySQLEntitlementRepository
from .entitlements.repository import EntitlementRepository
from .entitlements.service import EntitlementLedger
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayCalendar
from .leave.mysql_leave_repository import MySQLLeaveRequestRepository
from .leave.repository import LeaveRequestRepository
from .leave.service import LeaveService
from .users.department_repository import DepartmentRepository
from .users.department_service import DepartmentService
from .users.mysql_department_repository import MySQLDepartmentRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    departments_repo: DepartmentRepository
    attendance_repo: AttendanceRepository
    leave_repo: LeaveRequestRepository
    entitlements_repo: EntitlementRepository
    holidays_repo: HolidayRepository
    audit_log: Optional[AuditLog]

    authority: ApprovalAuthority
    calendar: HolidayCalendar
    ledger: EntitlementLedger
    auth_service: AuthService
    user_service: UserService
    department_service: DepartmentService
    attendance_service: AttendanceService
    leave_service: LeaveService
    team_overview: TeamOverview

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    users_repo: UserRepository,
    departments_repo: DepartmentRepository,
    attendance_repo: AttendanceRepository,
    leave_repo: LeaveRequestRepository,
    entitlements_repo: EntitlementRepository,
    holidays_repo: HolidayRepository,
    audit_log: Optional[AuditLog] = None,
    tx: Optional[TransactionManager] = None,
    policy: Optional[ApprovalPolicy] = None,
    comp_off_days: Decimal = DEFAULT_COMP_OFF_ACCRUAL_DAYS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories (MySQL or in-memory)."""

    authority = ApprovalAuthority(users_repo, policy)
    calendar = HolidayCalendar(holidays_repo)
    ledger = EntitlementLedger(entitlements_repo, users_repo, authority=authority, tx=tx, audit=audit_log)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        calendar,
        ledger,
        authority,
        tx=tx,
        audit=audit_log,
        comp_off_days=comp_off_days,
    )
    leave_service = LeaveService(leave_repo, ledger, users_repo, authority, tx=tx, audit=audit_log)

    return Container(
        users_repo=users_repo,
        departments_repo=departments_repo,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        entitlements_repo=entitlements_repo,
        holidays_repo=holidays_repo,
        audit_log=audit_log,
        authority=authority,
        calendar=calendar,
        ledger=ledger,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, departments_repo),
        department_service=DepartmentService(departments_repo, users_repo),
        attendance_service=attendance_service,
        leave_service=leave_service,
        team_overview=TeamOverview(users_repo, ledger, leave_service, authority),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    policy: Optional[ApprovalPolicy] = None,
    comp_off_days: Decimal = DEFAULT_COMP_OFF_ACCRUAL_DAYS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        users_repo=MySQLUserRepository(conn),
        departments_repo=MySQLDepartmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_repo=MySQLLeaveRequestRepository(conn),
        entitlements_repo=MySQLEntitlementRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        audit_log=MySQLAuditLog(conn),
        tx=conn,
        policy=policy,
        comp_off_days=comp_off_days,
        conn=conn,
    )
