from __future__ import annotations

from functools import partial

from flask import Flask

from ..common.http import current_actor, ok, roles_required
from ..core.enums import Role
from ..container import Container
from ..leave.controller import balance_dto
from .team import TeamMember


def team_member_dto(m: TeamMember) -> dict:
    return {
        "id": m.user.user_id,
        "employee_code": m.user.employee_code,
        "full_name": m.user.full_name,
        "email": m.user.email,
        "balance": balance_dto(m.balance) if m.balance else None,
        "upcoming_leaves": [
            {
                "id": r.request_id,
                "leave_type": r.leave_type,
                "start_date": r.start_date,
                "end_date": r.end_date,
                "total_days": r.total_days,
                "status": r.status,
            }
            for r in m.upcoming_leaves
        ],
    }


def register(app: Flask, container: Container) -> None:
    def _team_members(admin_path: bool = False):
        members = container.team_overview.team_members(current_actor(), admin_path=admin_path)
        return ok([team_member_dto(m) for m in members])

    app.add_url_rule(
        "/api/approval/team-members",
        "approval_team_members",
        roles_required(Role.MANAGER, Role.ADMINISTRATOR)(_team_members),
    )
    app.add_url_rule(
        "/api/admin/team-members",
        "admin_team_members",
        roles_required(Role.ADMINISTRATOR)(partial(_team_members, admin_path=True)),
    )
