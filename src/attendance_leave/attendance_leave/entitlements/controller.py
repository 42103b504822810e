from __future__ import annotations

from functools import partial

from flask import Flask, request

from ..common.http import current_actor, json_body, ok, optional_int, required_int, roles_required
from ..common.datetime_utils import now_local
from ..core.enums import Role
from ..core.exceptions import NotFoundError
from ..container import Container
from ..leave.controller import balance_dto


def register(app: Flask, container: Container) -> None:
    approvers = roles_required(Role.MANAGER, Role.ADMINISTRATOR)
    admin_only = roles_required(Role.ADMINISTRATOR)
    ledger = container.ledger

    @app.post("/api/admin/leave-entitlement", endpoint="admin_allocate_entitlement")
    @admin_only
    def allocate():
        data = json_body()
        balance = ledger.allocate(
            user_id=required_int(data.get("user_id"), "User id"),
            year=required_int(data.get("year"), "Year"),
            casual=data.get("casual_leave_balance", 0),
            earned=data.get("earned_leave_balance", 0),
            comp_off=data.get("compensatory_off_balance", 0),
            actor_id=current_actor().user_id,
        )
        return ok(balance_dto(balance), "Leave entitlement allocated successfully")

    @app.get("/api/admin/leave-entitlement/<int:user_id>", endpoint="admin_get_entitlement")
    @admin_only
    def get_entitlement(user_id: int):
        year = optional_int(request.args.get("year"), "Year") or now_local().year
        balance = ledger.get_balance(user_id, year)
        if balance is None:
            raise NotFoundError("Leave entitlement not found")
        return ok(balance_dto(balance))

    def _assign_comp_off(admin_path: bool = False):
        data = json_body()
        ledger.assign_comp_off(
            actor=current_actor(),
            employee_id=required_int(data.get("employee_id"), "Employee id"),
            days=data.get("days"),
            reason=data.get("reason"),
            admin_path=admin_path,
        )
        return ok(message="Compensatory off assigned successfully")

    app.add_url_rule(
        "/api/approval/assign-comp-off", "approval_assign_comp_off", approvers(_assign_comp_off), methods=["POST"]
    )
    app.add_url_rule(
        "/api/admin/assign-comp-off",
        "admin_assign_comp_off",
        admin_only(partial(_assign_comp_off, admin_path=True)),
        methods=["POST"],
    )
