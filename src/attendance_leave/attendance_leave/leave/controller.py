from __future__ import annotations

from functools import partial

from flask import Flask, request

from ..common.http import current_actor, json_body, login_required, ok, required_int, roles_required
from ..core.enums import Role
from ..container import Container
from ..entitlements.model import LeaveBalance
from .model import LeaveRequest


def leave_dto(r: LeaveRequest) -> dict:
    return {
        "id": r.request_id,
        "user_id": r.user_id,
        "leave_type": r.leave_type,
        "start_date": r.start_date,
        "end_date": r.end_date,
        "total_days": r.total_days,
        "reason": r.reason,
        "status": r.status,
        "approved_by": r.approved_by,
        "approved_at": r.approved_at,
        "rejection_reason": r.rejection_reason,
        "created_at": r.created_at,
    }


def balance_dto(b: LeaveBalance) -> dict:
    return {
        "year": b.year,
        "casual_leave_balance": b.casual,
        "earned_leave_balance": b.earned,
        "compensatory_off_balance": b.comp_off,
    }


def register(app: Flask, container: Container) -> None:
    approvers = roles_required(Role.MANAGER, Role.ADMINISTRATOR)
    admin_only = roles_required(Role.ADMINISTRATOR)
    svc = container.leave_service

    @app.post("/api/leave/request", endpoint="leave_request")
    @login_required
    def create_request():
        data = json_body()
        req = svc.create(
            current_actor().user_id,
            leave_type=data.get("leave_type", ""),
            start_date=data.get("start_date", ""),
            end_date=data.get("end_date", ""),
            reason=data.get("reason", ""),
        )
        return ok(leave_dto(req), "Leave request submitted successfully")

    @app.get("/api/leave/my-requests", endpoint="leave_my_requests")
    @login_required
    def my_requests():
        return ok([leave_dto(r) for r in svc.my_requests(current_actor().user_id)])

    @app.get("/api/leave/balance", endpoint="leave_balance")
    @login_required
    def balance():
        b = svc.get_available_balance(current_actor().user_id)
        if b is None:
            return ok(None, "No leave entitlement found for the current year")
        return ok(balance_dto(b))

    @app.post("/api/leave/cancel/<int:request_id>", endpoint="leave_cancel")
    @login_required
    def cancel(request_id: int):
        req = svc.cancel(current_actor().user_id, request_id)
        return ok(leave_dto(req), "Leave request cancelled successfully")

    def _pending(admin_path: bool = False):
        return ok([leave_dto(r) for r in svc.pending_for(current_actor(), admin_path=admin_path)])

    def _decide(request_id=None, admin_path: bool = False):
        data = json_body()
        if request_id is None:
            request_id = required_int(data.get("leave_request_id"), "Leave request id")
        approved = data.get("approved") in (True, 1, "true", "1")
        req = svc.approve_or_reject(
            current_actor(),
            request_id,
            approved=approved,
            rejection_reason=data.get("rejection_reason"),
            admin_path=admin_path,
        )
        return ok(leave_dto(req), f"Leave request {'approved' if approved else 'rejected'} successfully")

    def _team_history(admin_path: bool = False):
        rows = svc.team_history(
            current_actor(),
            start_date=request.args.get("start_date"),
            end_date=request.args.get("end_date"),
            admin_path=admin_path,
        )
        return ok([leave_dto(r) for r in rows])

    # Manager-facing routes apply the direct-manager rule to every caller.
    app.add_url_rule("/api/leave/pending-approvals", "leave_pending_approvals", approvers(_pending))
    app.add_url_rule("/api/leave/approve", "leave_approve", approvers(_decide), methods=["POST"])
    app.add_url_rule("/api/approval/leave/history", "approval_leave_history", approvers(_team_history))

    app.add_url_rule("/api/admin/leave/pending", "admin_leave_pending", admin_only(partial(_pending, admin_path=True)))
    app.add_url_rule(
        "/api/admin/leave/<int:request_id>/decision",
        "admin_leave_decision",
        admin_only(partial(_decide, admin_path=True)),
        methods=["POST"],
    )
    app.add_url_rule(
        "/api/admin/leave/history", "admin_leave_history", admin_only(partial(_team_history, admin_path=True))
    )
