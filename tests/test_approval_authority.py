from __future__ import annotations

from datetime import date

import pytest

from src.attendance_leave.attendance_leave.approvals.authority import Actor, ApprovalAuthority, ApprovalPolicy
from src.attendance_leave.attendance_leave.core.enums import Role
from src.attendance_leave.attendance_leave.core.exceptions import AuthorizationError, ValidationError


class StaticHierarchy:
    def __init__(self, managers: dict[int, int]):
        self.managers = managers
        self.lookups = 0

    def manager_of(self, user_id: int):
        self.lookups += 1
        return self.managers.get(user_id)


TODAY = date(2025, 3, 5)


def test_manager_acts_only_on_direct_reports():
    authority = ApprovalAuthority(StaticHierarchy({10: 2, 11: 4}))
    manager = Actor(2, Role.MANAGER)

    assert authority.can_act_on(manager, 10)
    assert not authority.can_act_on(manager, 11)
    with pytest.raises(AuthorizationError):
        authority.ensure_can_act_on(manager, 11)


def test_employee_never_acts_even_as_recorded_manager():
    authority = ApprovalAuthority(StaticHierarchy({10: 3}))
    assert not authority.can_act_on(Actor(3, Role.EMPLOYEE), 10)


def test_admin_bypasses_hierarchy_on_admin_path_by_default():
    hierarchy = StaticHierarchy({})
    authority = ApprovalAuthority(hierarchy)

    assert authority.can_act_on(Actor(1, Role.ADMINISTRATOR), 10, admin_path=True)
    assert hierarchy.lookups == 0


def test_admin_on_manager_path_follows_hierarchy():
    authority = ApprovalAuthority(StaticHierarchy({10: 1, 11: 2}))
    admin = Actor(1, Role.ADMINISTRATOR)

    assert authority.can_act_on(admin, 10)
    assert not authority.can_act_on(admin, 11)
    with pytest.raises(AuthorizationError):
        authority.ensure_can_act_on(admin, 11)


def test_admin_follows_hierarchy_when_bypass_disabled():
    authority = ApprovalAuthority(StaticHierarchy({10: 1, 11: 2}), ApprovalPolicy(admin_bypasses_hierarchy=False))
    admin = Actor(1, Role.ADMINISTRATOR)

    assert authority.can_act_on(admin, 10, admin_path=True)
    assert not authority.can_act_on(admin, 11, admin_path=True)


def test_manager_gains_nothing_from_admin_path():
    authority = ApprovalAuthority(StaticHierarchy({11: 4}))
    assert not authority.can_act_on(Actor(2, Role.MANAGER), 11, admin_path=True)


def test_hierarchy_is_read_on_every_check():
    hierarchy = StaticHierarchy({10: 2})
    authority = ApprovalAuthority(hierarchy)
    manager = Actor(2, Role.MANAGER)

    assert authority.can_act_on(manager, 10)
    hierarchy.managers[10] = 4
    assert not authority.can_act_on(manager, 10)


@pytest.mark.parametrize(
    "work_date, allowed",
    [(date(2025, 3, 4), True), (TODAY, False), (date(2025, 3, 6), False)],
)
def test_manager_backdates_only_past_dates(work_date, allowed):
    authority = ApprovalAuthority(StaticHierarchy({}))
    assert authority.can_backdate(Actor(2, Role.MANAGER), work_date, TODAY) is allowed


def test_admin_backdates_any_date_on_admin_path_unless_disabled():
    admin = Actor(1, Role.ADMINISTRATOR)
    authority = ApprovalAuthority(StaticHierarchy({}))
    assert authority.can_backdate(admin, date(2025, 3, 6), TODAY, admin_path=True)
    assert not authority.can_backdate(admin, date(2025, 3, 6), TODAY)

    strict = ApprovalAuthority(StaticHierarchy({}), ApprovalPolicy(admin_backdates_any_date=False))
    with pytest.raises(ValidationError):
        strict.ensure_can_backdate(admin, TODAY, TODAY, admin_path=True)
