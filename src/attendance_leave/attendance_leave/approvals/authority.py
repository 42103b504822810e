"""Approval Authority: who may decide on whose attendance and leave.

The rule is a pure predicate over an org-hierarchy lookup so it can be tested
without storage, and it is evaluated on every decision because reporting lines
may change between submission and approval.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError


@dataclass(frozen=True)
class Actor:
    """Authenticated caller as handed over by the HTTP boundary."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMINISTRATOR

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER


class OrgHierarchy(Protocol):
    def manager_of(self, user_id: int) -> Optional[int]:
        raise NotImplementedError


@dataclass(frozen=True)
class ApprovalPolicy:
    """Role-specific exceptions to the manager-hierarchy rule.

    Both switches apply to the administrator routes only and default to
    letting administrators decide for anyone and backdate attendance to any
    date, including today and the future. Turning a switch off makes
    administrators follow the manager rule for that check.
    """

    admin_bypasses_hierarchy: bool = True
    admin_backdates_any_date: bool = True


class ApprovalAuthority:
    """Hierarchy checks for the manager-facing and admin-facing paths.

    ``admin_path`` is set only by the administrator routes. On every other
    path an administrator is held to the same direct-manager rule as a
    manager, and the policy switches apply only when ``admin_path`` is set.
    """

    def __init__(self, hierarchy: OrgHierarchy, policy: Optional[ApprovalPolicy] = None):
        self._hierarchy = hierarchy
        self._policy = policy or ApprovalPolicy()

    @property
    def policy(self) -> ApprovalPolicy:
        return self._policy

    def bypasses_hierarchy(self, actor: Actor, *, admin_path: bool = False) -> bool:
        return admin_path and actor.is_admin and self._policy.admin_bypasses_hierarchy

    def can_act_on(self, actor: Actor, subject_user_id: int, *, admin_path: bool = False) -> bool:
        if self.bypasses_hierarchy(actor, admin_path=admin_path):
            return True
        if not (actor.is_manager or actor.is_admin):
            return False
        return self._hierarchy.manager_of(int(subject_user_id)) == actor.user_id

    def ensure_can_act_on(
        self,
        actor: Actor,
        subject_user_id: int,
        *,
        admin_path: bool = False,
        message: str = "You are not authorized to act on this employee",
    ) -> None:
        if not self.can_act_on(actor, subject_user_id, admin_path=admin_path):
            raise AuthorizationError(message)

    def can_backdate(self, actor: Actor, work_date: date, today: date, *, admin_path: bool = False) -> bool:
        if admin_path and actor.is_admin and self._policy.admin_backdates_any_date:
            return True
        return work_date < today

    def ensure_can_backdate(self, actor: Actor, work_date: date, today: date, *, admin_path: bool = False) -> None:
        if not self.can_backdate(actor, work_date, today, admin_path=admin_path):
            raise ValidationError("Cannot log attendance for today or future dates")
