from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import json_body, login_required, ok, optional_int, roles_required
from ..core.enums import Role
from ..container import Container
from .model import PublicHoliday


def holiday_dto(h: PublicHoliday) -> dict:
    return {
        "id": h.holiday_id,
        "date": h.holiday_date,
        "name": h.name,
        "description": h.description,
        "year": h.year,
        "is_active": h.is_active,
    }


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(Role.ADMINISTRATOR)
    calendar = container.calendar

    @app.get("/api/holidays", endpoint="holidays_list")
    @login_required
    def list_holidays():
        year = optional_int(request.args.get("year"), "Year") or now_local().year
        return ok([holiday_dto(h) for h in calendar.list_for_year(year)])

    @app.post("/api/admin/holidays", endpoint="admin_create_holiday")
    @admin_only
    def create_holiday():
        data = json_body()
        holiday = calendar.create(
            holiday_date=data.get("date", ""),
            name=data.get("name", ""),
            description=data.get("description"),
        )
        return ok(holiday_dto(holiday), "Public holiday created successfully", status=201)

    @app.get("/api/admin/holidays", endpoint="admin_list_holidays")
    @admin_only
    def admin_list_holidays():
        year = optional_int(request.args.get("year"), "Year") or now_local().year
        return ok([holiday_dto(h) for h in calendar.list_for_year(year)])

    @app.delete("/api/admin/holidays/<int:holiday_id>", endpoint="admin_delete_holiday")
    @admin_only
    def delete_holiday(holiday_id: int):
        calendar.deactivate(holiday_id)
        return ok(message="Public holiday deleted successfully")
