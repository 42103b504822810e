from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.attendance_leave.attendance_leave.approvals.authority import Actor, ApprovalPolicy
from src.attendance_leave.attendance_leave.attendance.model import AttendanceRecord
from src.attendance_leave.attendance_leave.audit.model import AuditEntry
from src.attendance_leave.attendance_leave.container import assemble
from src.attendance_leave.attendance_leave.core.enums import ApprovalStatus, LeaveType, Role
from src.attendance_leave.attendance_leave.core.exceptions import ConflictError
from src.attendance_leave.attendance_leave.entitlements.model import LeaveEntitlement
from src.attendance_leave.attendance_leave.holidays.model import PublicHoliday
from src.attendance_leave.attendance_leave.leave.model import LeaveRequest
from src.attendance_leave.attendance_leave.users.department_model import Department
from src.attendance_leave.attendance_leave.users.model import User

ADMIN_ID = 1
MANAGER_ID = 2
EMPLOYEE_ID = 3
OTHER_MANAGER_ID = 4
OTHER_EMPLOYEE_ID = 5
INACTIVE_ID = 6

PASSWORD = "secret123"
_PASSWORD_HASH = generate_password_hash(PASSWORD, method="pbkdf2:sha256:1000")


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self._id = 100

    def add(self, user: User) -> User:
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.employee_code == employee_code), None)

    def create_user(self, *, full_name, email, employee_code, password_hash, role, manager_id, dept_id) -> int:
        self._id += 1
        self.users[self._id] = User(
            user_id=self._id,
            full_name=full_name,
            email=email,
            employee_code=employee_code,
            password_hash=password_hash,
            role=role,
            manager_id=manager_id,
            dept_id=dept_id,
        )
        return self._id

    def update_user(self, user_id: int, **fields) -> bool:
        user = self.users.get(int(user_id))
        if not user or not fields:
            return False
        self.users[user.user_id] = replace(user, **fields)
        return True

    def list_active(self):
        return sorted((u for u in self.users.values() if u.is_active), key=lambda u: u.full_name)

    def list_direct_reports(self, manager_id: int):
        return sorted(
            (u for u in self.users.values() if u.manager_id == manager_id and u.is_active),
            key=lambda u: u.employee_code,
        )

    def count_active_in_department(self, dept_id: int) -> int:
        return sum(1 for u in self.users.values() if u.dept_id == dept_id and u.is_active)

    def manager_of(self, user_id: int) -> Optional[int]:
        user = self.users.get(int(user_id))
        return user.manager_id if user else None


class InMemoryDepartments:
    def __init__(self):
        self.departments: dict[int, Department] = {}
        self._id = 0

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        return self.departments.get(int(dept_id))

    def list_active(self):
        return sorted((d for d in self.departments.values() if d.is_active), key=lambda d: d.name)

    def create(self, *, name, description, weekly_off_days) -> int:
        self._id += 1
        self.departments[self._id] = Department(
            dept_id=self._id, name=name, description=description, weekly_off_days=tuple(weekly_off_days)
        )
        return self._id

    def update(self, *, dept_id, name, description, weekly_off_days, is_active) -> bool:
        if dept_id not in self.departments:
            return False
        self.departments[dept_id] = Department(
            dept_id=dept_id,
            name=name,
            description=description,
            weekly_off_days=tuple(weekly_off_days),
            is_active=is_active,
        )
        return True

    def set_active(self, dept_id: int, *, is_active: bool) -> bool:
        dept = self.departments.get(int(dept_id))
        if not dept:
            return False
        self.departments[dept.dept_id] = replace(dept, is_active=is_active)
        return True


class InMemoryEntitlements:
    _FIELD = {
        LeaveType.CASUAL_LEAVE: "casual",
        LeaveType.EARNED_LEAVE: "earned",
        LeaveType.COMPENSATORY_OFF: "comp_off",
    }

    def __init__(self):
        self.rows: dict[tuple[int, int], LeaveEntitlement] = {}
        self._id = 0

    def get(self, user_id: int, year: int, *, for_update: bool = False) -> Optional[LeaveEntitlement]:
        return self.rows.get((int(user_id), int(year)))

    def upsert(self, *, user_id, year, casual, earned, comp_off) -> None:
        existing = self.rows.get((user_id, year))
        if existing:
            self.rows[(user_id, year)] = replace(existing, casual=casual, earned=earned, comp_off=comp_off)
        else:
            self.create(user_id=user_id, year=year, casual=casual, earned=earned, comp_off=comp_off)

    def create(self, *, user_id, year, casual, earned, comp_off) -> int:
        if (user_id, year) in self.rows:
            raise ConflictError("Leave entitlement already exists")
        self._id += 1
        self.rows[(user_id, year)] = LeaveEntitlement(
            entitlement_id=self._id,
            user_id=user_id,
            year=year,
            casual=Decimal(casual),
            earned=Decimal(earned),
            comp_off=Decimal(comp_off),
        )
        return self._id

    def adjust(self, *, entitlement_id, leave_type, delta) -> bool:
        for key, row in self.rows.items():
            if row.entitlement_id == entitlement_id:
                field = self._FIELD[leave_type]
                self.rows[key] = replace(row, **{field: getattr(row, field) + Decimal(delta)})
                return True
        return False


class InMemoryHolidays:
    def __init__(self):
        self.holidays: dict[int, PublicHoliday] = {}
        self._id = 0

    def get_by_id(self, holiday_id: int) -> Optional[PublicHoliday]:
        return self.holidays.get(int(holiday_id))

    def get_by_date(self, holiday_date: date) -> Optional[PublicHoliday]:
        return next((h for h in self.holidays.values() if h.holiday_date == holiday_date), None)

    def exists_active_on(self, holiday_date: date) -> bool:
        return any(h.holiday_date == holiday_date and h.is_active for h in self.holidays.values())

    def create(self, *, holiday_date, name, description) -> int:
        self._id += 1
        self.holidays[self._id] = PublicHoliday(
            holiday_id=self._id,
            holiday_date=holiday_date,
            name=name,
            description=description,
            year=holiday_date.year,
        )
        return self._id

    def list_active_for_year(self, year: int):
        return sorted(
            (h for h in self.holidays.values() if h.year == year and h.is_active), key=lambda h: h.holiday_date
        )

    def set_active(self, holiday_id: int, *, is_active: bool) -> bool:
        h = self.holidays.get(int(holiday_id))
        if not h:
            return False
        self.holidays[h.holiday_id] = replace(h, is_active=is_active)
        return True


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        return self.records.get(int(attendance_id))

    def get_for_user_and_date(self, user_id: int, work_date: date, *, for_update: bool = False):
        return next(
            (r for r in self.records.values() if r.user_id == user_id and r.work_date == work_date), None
        )

    def create(self, *, user_id, work_date, login_time, logout_time, is_weekend, is_public_holiday, status,
               approved_by=None, approved_at=None) -> int:
        if self.get_for_user_and_date(user_id, work_date):
            raise ConflictError("Attendance already recorded for this date")
        self._id += 1
        self.records[self._id] = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            work_date=work_date,
            login_time=login_time,
            logout_time=logout_time,
            is_weekend=is_weekend,
            is_public_holiday=is_public_holiday,
            status=status,
            approved_by=approved_by,
            approved_at=approved_at,
        )
        return self._id

    def set_logout(self, *, attendance_id, logout_time) -> bool:
        r = self.records.get(attendance_id)
        if not r or r.logout_time is not None:
            return False
        self.records[attendance_id] = replace(r, logout_time=logout_time)
        return True

    def decide(self, *, attendance_id, status, decided_by, decided_at) -> bool:
        r = self.records.get(attendance_id)
        if not r or r.status != ApprovalStatus.PENDING:
            return False
        self.records[attendance_id] = replace(r, status=status, approved_by=decided_by, approved_at=decided_at)
        return True

    def list_for_users(self, *, user_ids=None, status=None, start_date=None, end_date=None, limit=500):
        rows = [
            r for r in self.records.values()
            if (user_ids is None or r.user_id in user_ids)
            and (status is None or r.status == status)
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
        ]
        rows.sort(key=lambda r: (r.work_date, r.login_time), reverse=True)
        return rows[:limit]


class InMemoryLeaveRequests:
    def __init__(self):
        self.requests: dict[int, LeaveRequest] = {}
        self._id = 0

    def get_by_id(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        return self.requests.get(int(request_id))

    def create(self, *, user_id, leave_type, start_date, end_date, total_days, reason, created_at) -> int:
        self._id += 1
        self.requests[self._id] = LeaveRequest(
            request_id=self._id,
            user_id=user_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            reason=reason,
            status=ApprovalStatus.PENDING,
            created_at=created_at,
        )
        return self._id

    def has_overlap(self, user_id, start_date, end_date) -> bool:
        return any(
            r.user_id == user_id
            and r.status not in {ApprovalStatus.REJECTED, ApprovalStatus.CANCELLED}
            and r.overlaps(start_date, end_date)
            for r in self.requests.values()
        )

    def decide(self, *, request_id, status, decided_by, decided_at, rejection_reason=None) -> bool:
        r = self.requests.get(request_id)
        if not r or r.status != ApprovalStatus.PENDING:
            return False
        self.requests[request_id] = replace(
            r, status=status, approved_by=decided_by, approved_at=decided_at, rejection_reason=rejection_reason
        )
        return True

    def cancel(self, request_id) -> bool:
        r = self.requests.get(request_id)
        if not r or r.status != ApprovalStatus.PENDING:
            return False
        self.requests[request_id] = replace(r, status=ApprovalStatus.CANCELLED)
        return True

    def pending_days_by_type(self, user_id, year):
        out: dict[LeaveType, Decimal] = {}
        for r in self.requests.values():
            if r.user_id == user_id and r.status == ApprovalStatus.PENDING and r.start_date.year == year:
                out[r.leave_type] = out.get(r.leave_type, Decimal("0")) + r.total_days
        return out

    def list_for_users(self, *, user_ids=None, status=None, start_date=None, end_date=None, limit=500,
                       oldest_first=False):
        rows = [
            r for r in self.requests.values()
            if (user_ids is None or r.user_id in user_ids)
            and (status is None or r.status == status)
            and (start_date is None or r.end_date >= start_date)
            and (end_date is None or r.start_date <= end_date)
        ]
        rows.sort(key=lambda r: (r.created_at, r.request_id), reverse=not oldest_first)
        return rows[:limit]

    def list_upcoming(self, user_id, today, limit=5):
        rows = [
            r for r in self.requests.values()
            if r.user_id == user_id
            and r.status in {ApprovalStatus.PENDING, ApprovalStatus.APPROVED}
            and r.start_date >= today
        ]
        rows.sort(key=lambda r: r.start_date)
        return rows[:limit]


class InMemoryAuditLog:
    def __init__(self):
        self.entries: list[AuditEntry] = []

    def append(self, *, user_id, action, entity_type, entity_id, old_value=None, new_value=None) -> None:
        self.entries.append(
            AuditEntry(
                audit_id=len(self.entries) + 1,
                user_id=user_id,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id),
                old_value=old_value,
                new_value=new_value,
                created_at=datetime.now(),
            )
        )

    def actions(self) -> list[str]:
        return [e.action for e in self.entries]


class RecordingTx:
    """Counts outermost transactions and whether they committed."""

    def __init__(self):
        self.depth = 0
        self.committed = 0
        self.rolled_back = 0

    @contextmanager
    def transaction(self):
        self.depth += 1
        try:
            yield
        except Exception:
            if self.depth == 1:
                self.rolled_back += 1
            raise
        else:
            if self.depth == 1:
                self.committed += 1
        finally:
            self.depth -= 1


def make_user(user_id: int, role: Role, *, manager_id=None, dept_id=None, is_active=True) -> User:
    return User(
        user_id=user_id,
        full_name=f"User {user_id}",
        email=f"user{user_id}@company.com",
        employee_code=f"EMP{user_id:03d}",
        password_hash=_PASSWORD_HASH,
        role=role,
        manager_id=manager_id,
        dept_id=dept_id,
        is_active=is_active,
    )


def build_world(policy: Optional[ApprovalPolicy] = None) -> SimpleNamespace:
    users = InMemoryUsers()
    users.add(make_user(ADMIN_ID, Role.ADMINISTRATOR))
    users.add(make_user(MANAGER_ID, Role.MANAGER))
    users.add(make_user(EMPLOYEE_ID, Role.EMPLOYEE, manager_id=MANAGER_ID))
    users.add(make_user(OTHER_MANAGER_ID, Role.MANAGER))
    users.add(make_user(OTHER_EMPLOYEE_ID, Role.EMPLOYEE, manager_id=OTHER_MANAGER_ID))
    users.add(make_user(INACTIVE_ID, Role.EMPLOYEE, manager_id=MANAGER_ID, is_active=False))

    world = SimpleNamespace(
        users=users,
        departments=InMemoryDepartments(),
        attendance=InMemoryAttendance(),
        leave=InMemoryLeaveRequests(),
        entitlements=InMemoryEntitlements(),
        holidays=InMemoryHolidays(),
        audit=InMemoryAuditLog(),
        tx=RecordingTx(),
    )
    world.container = assemble(
        users_repo=world.users,
        departments_repo=world.departments,
        attendance_repo=world.attendance,
        leave_repo=world.leave,
        entitlements_repo=world.entitlements,
        holidays_repo=world.holidays,
        audit_log=world.audit,
        tx=world.tx,
        policy=policy,
    )
    return world


@pytest.fixture
def world() -> SimpleNamespace:
    return build_world()


@pytest.fixture
def fixed_now() -> datetime:
    # Wednesday
    return datetime(2025, 3, 5, 9, 0, 0)


@pytest.fixture
def admin() -> Actor:
    return Actor(ADMIN_ID, Role.ADMINISTRATOR)


@pytest.fixture
def manager() -> Actor:
    return Actor(MANAGER_ID, Role.MANAGER)


@pytest.fixture
def other_manager() -> Actor:
    return Actor(OTHER_MANAGER_ID, Role.MANAGER)


@pytest.fixture
def employee() -> Actor:
    return Actor(EMPLOYEE_ID, Role.EMPLOYEE)
