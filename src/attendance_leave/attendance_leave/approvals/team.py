from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_UPCOMING_LEAVES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..entitlements.model import LeaveBalance
from ..entitlements.service import EntitlementLedger
from ..leave.model import LeaveRequest
from ..leave.service import LeaveService
from ..users.model import User
from ..users.repository import UserRepository
from .authority import Actor, ApprovalAuthority


@dataclass(frozen=True)
class TeamMember:
    user: User
    balance: Optional[LeaveBalance]
    upcoming_leaves: Sequence[LeaveRequest]


class TeamOverview:
    """People an approver looks after, with current-year balances."""

    def __init__(
        self,
        users: UserRepository,
        ledger: EntitlementLedger,
        leave: LeaveService,
        authority: ApprovalAuthority,
        *,
        upcoming_limit: int = DEFAULT_UPCOMING_LEAVES,
    ):
        self._users = users
        self._ledger = ledger
        self._leave = leave
        self._authority = authority
        self._upcoming_limit = int(upcoming_limit)

    def team_members(
        self, actor: Actor, *, admin_path: bool = False, now: Optional[datetime] = None
    ) -> Sequence[TeamMember]:
        now = now or now_local()

        if self._authority.bypasses_hierarchy(actor, admin_path=admin_path):
            members = sorted(
                (u for u in self._users.list_active() if u.role != Role.ADMINISTRATOR),
                key=lambda u: u.employee_code,
            )
        elif actor.is_manager or actor.is_admin:
            members = list(self._users.list_direct_reports(actor.user_id))
        else:
            raise AuthorizationError("Only managers and administrators can view team members")

        return [
            TeamMember(
                user=u,
                balance=self._ledger.get_balance(u.user_id, now.year),
                upcoming_leaves=self._leave.upcoming_for(u.user_id, today=now.date(), limit=self._upcoming_limit),
            )
            for u in members
        ]
