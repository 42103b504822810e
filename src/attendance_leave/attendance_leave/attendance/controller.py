from __future__ import annotations

from functools import partial
from typing import Optional

from flask import Flask, request

from ..common.http import current_actor, json_body, login_required, ok, required_int, roles_required
from ..core.enums import Role
from ..container import Container
from .model import AttendanceRecord


def attendance_dto(r: AttendanceRecord) -> dict:
    duration = r.work_duration
    return {
        "id": r.attendance_id,
        "user_id": r.user_id,
        "date": r.work_date,
        "login_time": r.login_time,
        "logout_time": r.logout_time,
        "work_hours": round(duration.total_seconds() / 3600, 2) if duration is not None else None,
        "is_weekend": r.is_weekend,
        "is_public_holiday": r.is_public_holiday,
        "status": r.status,
        "approved_by": r.approved_by,
        "approved_at": r.approved_at,
    }


def _optional_dto(r: Optional[AttendanceRecord]) -> Optional[dict]:
    return attendance_dto(r) if r else None


def register(app: Flask, container: Container) -> None:
    approvers = roles_required(Role.MANAGER, Role.ADMINISTRATOR)
    admin_only = roles_required(Role.ADMINISTRATOR)
    svc = container.attendance_service

    @app.post("/api/attendance/login", endpoint="attendance_login")
    @login_required
    def attendance_login():
        record = svc.login(current_actor().user_id)
        return ok(attendance_dto(record), "Login recorded successfully")

    @app.post("/api/attendance/logout", endpoint="attendance_logout")
    @login_required
    def attendance_logout():
        record = svc.logout(current_actor().user_id)
        return ok(attendance_dto(record), "Logout recorded successfully")

    @app.get("/api/attendance/today", endpoint="attendance_today")
    @login_required
    def attendance_today():
        return ok(_optional_dto(svc.get_today(current_actor().user_id)))

    @app.get("/api/attendance/history", endpoint="attendance_history")
    @login_required
    def attendance_history():
        rows = svc.history(
            current_actor().user_id,
            start_date=request.args.get("start_date"),
            end_date=request.args.get("end_date"),
        )
        return ok([attendance_dto(r) for r in rows])

    def _pending(admin_path: bool = False):
        return ok([attendance_dto(r) for r in svc.pending_for(current_actor(), admin_path=admin_path)])

    def _approve(attendance_id: int, admin_path: bool = False):
        record = svc.approve(current_actor(), attendance_id, admin_path=admin_path)
        return ok(attendance_dto(record), "Attendance approved successfully")

    def _reject(attendance_id: int, admin_path: bool = False):
        record = svc.reject(current_actor(), attendance_id, reason=json_body().get("reason"), admin_path=admin_path)
        return ok(attendance_dto(record), "Attendance rejected successfully")

    def _team_history(admin_path: bool = False):
        rows = svc.team_history(
            current_actor(),
            start_date=request.args.get("start_date"),
            end_date=request.args.get("end_date"),
            admin_path=admin_path,
        )
        return ok([attendance_dto(r) for r in rows])

    def _log_past(admin_path: bool = False):
        data = json_body()
        record = svc.log_past_attendance(
            current_actor(),
            employee_id=required_int(data.get("employee_id"), "Employee id"),
            work_date=data.get("date", ""),
            login_time=data.get("login_time", ""),
            logout_time=data.get("logout_time"),
            admin_path=admin_path,
        )
        return ok(attendance_dto(record), "Past attendance logged successfully")

    # Manager-facing routes apply the direct-manager rule to every caller.
    app.add_url_rule("/api/approval/attendance/pending", "approval_attendance_pending", approvers(_pending))
    app.add_url_rule(
        "/api/approval/attendance/<int:attendance_id>/approve",
        "approval_attendance_approve",
        approvers(_approve),
        methods=["POST"],
    )
    app.add_url_rule(
        "/api/approval/attendance/<int:attendance_id>/reject",
        "approval_attendance_reject",
        approvers(_reject),
        methods=["POST"],
    )
    app.add_url_rule("/api/approval/attendance/history", "approval_attendance_history", approvers(_team_history))
    app.add_url_rule(
        "/api/approval/log-past-attendance", "approval_log_past_attendance", approvers(_log_past), methods=["POST"]
    )

    app.add_url_rule(
        "/api/admin/attendance/pending", "admin_attendance_pending", admin_only(partial(_pending, admin_path=True))
    )
    app.add_url_rule(
        "/api/admin/attendance/<int:attendance_id>/approve",
        "admin_attendance_approve",
        admin_only(partial(_approve, admin_path=True)),
        methods=["POST"],
    )
    app.add_url_rule(
        "/api/admin/attendance/<int:attendance_id>/reject",
        "admin_attendance_reject",
        admin_only(partial(_reject, admin_path=True)),
        methods=["POST"],
    )
    app.add_url_rule(
        "/api/admin/attendance/history",
        "admin_attendance_history",
        admin_only(partial(_team_history, admin_path=True)),
    )
    app.add_url_rule(
        "/api/admin/log-past-attendance",
        "admin_log_past_attendance",
        admin_only(partial(_log_past, admin_path=True)),
        methods=["POST"],
    )
