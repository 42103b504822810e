from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from werkzeug.security import check_password_hash

from src.attendance_leave.attendance_leave.core.enums import Role
from src.attendance_leave.attendance_leave.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

from conftest import ADMIN_ID, EMPLOYEE_ID, INACTIVE_ID, MANAGER_ID, OTHER_EMPLOYEE_ID, PASSWORD


def test_authenticate_by_email(world):
    s_user = world.container.auth_service.authenticate("user3@company.com", PASSWORD)
    assert s_user.user_id == EMPLOYEE_ID
    assert s_user.role == Role.EMPLOYEE
    assert s_user.manager_id == MANAGER_ID


@pytest.mark.parametrize(
    "email, password",
    [
        ("user3@company.com", "wrong"),
        ("nobody@company.com", PASSWORD),
        ("user6@company.com", PASSWORD),
        ("user3@company.com", 123456),
        (42, PASSWORD),
    ],
)
def test_authenticate_rejects_bad_credentials_and_inactive_users(world, email, password):
    with pytest.raises(AuthenticationError):
        world.container.auth_service.authenticate(email, password)


def test_create_user_hashes_password_and_links_manager(world):
    dept = world.container.department_service.create(name="Engineering")
    user = world.container.user_service.create_user(
        full_name="New Hire",
        email="New.Hire@Company.com",
        employee_code="EMP100",
        password="hunter22",
        role="Employee",
        manager_id=MANAGER_ID,
        dept_id=dept.dept_id,
    )

    stored = world.users.get_by_id(user.user_id)
    assert stored.email == "new.hire@company.com"
    assert stored.manager_id == MANAGER_ID
    assert check_password_hash(stored.password_hash, "hunter22")
    assert world.users.manager_of(user.user_id) == MANAGER_ID


def test_create_user_uniqueness(world):
    svc = world.container.user_service
    with pytest.raises(ConflictError):
        svc.create_user(full_name="X", email="user3@company.com", employee_code="EMP900", password="secret1", role="Employee")
    with pytest.raises(ConflictError):
        svc.create_user(full_name="X", email="x@company.com", employee_code="EMP003", password="secret1", role="Employee")


def test_create_user_validations(world):
    svc = world.container.user_service
    with pytest.raises(ValidationError):
        svc.create_user(full_name="X", email="x@company.com", employee_code="E1", password="short", role="Employee")
    with pytest.raises(ValidationError):
        svc.create_user(full_name="X", email="x@company.com", employee_code="E1", password="secret1", role="Intern")
    # an employee cannot be someone's manager
    with pytest.raises(ValidationError):
        svc.create_user(
            full_name="X", email="x@company.com", employee_code="E1", password="secret1", role="Employee",
            manager_id=EMPLOYEE_ID,
        )
    with pytest.raises(NotFoundError):
        svc.create_user(
            full_name="X", email="x@company.com", employee_code="E1", password="secret1", role="Employee", dept_id=9
        )


def test_update_user_is_partial(world):
    svc = world.container.user_service
    updated = svc.update_user(EMPLOYEE_ID, full_name="Renamed", manager_id=ADMIN_ID)

    assert updated.full_name == "Renamed"
    assert updated.manager_id == ADMIN_ID
    assert updated.email == "user3@company.com"

    with pytest.raises(ConflictError):
        svc.update_user(EMPLOYEE_ID, email="user5@company.com")
    with pytest.raises(NotFoundError):
        svc.update_user(999, full_name="Ghost")


def test_list_active_users_skips_inactive(world):
    ids = {u.user_id for u in world.container.user_service.list_active_users()}
    assert INACTIVE_ID not in ids
    assert EMPLOYEE_ID in ids


def test_department_weekly_off_days_are_normalized(world):
    dept = world.container.department_service.create(name="Ops", weekly_off_days=["sunday", "Friday", "Sunday"])
    assert dept.weekly_off_days == ("Friday", "Sunday")

    with pytest.raises(ValidationError):
        world.container.department_service.create(name="Bad", weekly_off_days=["Funday"])
    with pytest.raises(ValidationError):
        world.container.department_service.create(name="Bad", weekly_off_days=6)
    with pytest.raises(ValidationError):
        world.container.department_service.create(name="Bad", description=3)


def test_department_with_active_employees_cannot_be_deleted(world):
    svc = world.container.department_service
    dept = svc.create(name="Engineering", description="Platform")
    world.container.user_service.update_user(EMPLOYEE_ID, dept_id=dept.dept_id)

    with pytest.raises(ConflictError):
        svc.deactivate(dept.dept_id)

    world.container.user_service.update_user(EMPLOYEE_ID, is_active=False)
    svc.deactivate(dept.dept_id)
    assert svc.list_active() == []


def test_update_unknown_department(world):
    with pytest.raises(NotFoundError):
        world.container.department_service.update(5, name="Nope")


def test_team_members_for_manager(world, manager, fixed_now):
    world.container.ledger.allocate(user_id=EMPLOYEE_ID, year=2025, casual=12, earned=15, comp_off=0)
    world.container.leave_service.create(
        EMPLOYEE_ID, leave_type="CasualLeave", start_date="2025-03-20", end_date="2025-03-21", reason="Trip",
        now=fixed_now,
    )

    members = world.container.team_overview.team_members(manager, now=fixed_now)

    assert [m.user.user_id for m in members] == [EMPLOYEE_ID]
    assert members[0].balance.casual == Decimal("12")
    assert [r.start_date.isoformat() for r in members[0].upcoming_leaves] == ["2025-03-20"]


def test_team_members_for_admin_lists_all_non_admins(world, admin, fixed_now):
    members = world.container.team_overview.team_members(admin, admin_path=True, now=fixed_now)

    ids = [m.user.user_id for m in members]
    assert ADMIN_ID not in ids and INACTIVE_ID not in ids
    assert OTHER_EMPLOYEE_ID in ids
    assert all(m.balance is None for m in members)


def test_team_members_for_admin_on_manager_path_are_direct_reports(world, admin, fixed_now):
    assert world.container.team_overview.team_members(admin, now=fixed_now) == []


def test_team_members_forbidden_for_employee(world, employee):
    with pytest.raises(AuthorizationError):
        world.container.team_overview.team_members(employee, now=datetime(2025, 3, 5))
