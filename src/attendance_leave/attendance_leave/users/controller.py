from __future__ import annotations

from datetime import timedelta

from flask import Flask, session

from ..common.http import current_actor, json_body, login_required, ok, optional_int, roles_required
from ..core.enums import Role
from ..container import Container
from .department_model import Department
from .model import User


def user_dto(u: User) -> dict:
    return {
        "id": u.user_id,
        "full_name": u.full_name,
        "email": u.email,
        "employee_code": u.employee_code,
        "role": u.role,
        "manager_id": u.manager_id,
        "dept_id": u.dept_id,
        "is_active": u.is_active,
    }


def department_dto(d: Department) -> dict:
    return {
        "id": d.dept_id,
        "name": d.name,
        "description": d.description,
        "weekly_off_days": list(d.weekly_off_days),
        "is_active": d.is_active,
    }


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(Role.ADMINISTRATOR)

    @app.post("/api/auth/login", endpoint="auth_login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)
        session["user_id"] = s_user.user_id
        session["role"] = s_user.role.value
        session["name"] = s_user.full_name

        return ok(
            {
                "id": s_user.user_id,
                "full_name": s_user.full_name,
                "email": s_user.email,
                "employee_code": s_user.employee_code,
                "role": s_user.role,
                "manager_id": s_user.manager_id,
                "dept_id": s_user.dept_id,
            },
            "Login successful",
        )

    @app.post("/api/auth/logout", endpoint="auth_logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.get("/api/auth/me", endpoint="auth_me")
    @login_required
    def me():
        return ok(user_dto(container.user_service.get_user(current_actor().user_id)))

    @app.get("/api/admin/users", endpoint="admin_list_users")
    @admin_only
    def list_users():
        return ok([user_dto(u) for u in container.user_service.list_active_users()])

    @app.post("/api/admin/users", endpoint="admin_create_user")
    @admin_only
    def create_user():
        data = json_body()
        user = container.user_service.create_user(
            full_name=data.get("full_name", ""),
            email=data.get("email", ""),
            employee_code=data.get("employee_code", ""),
            password=data.get("password", ""),
            role=data.get("role", Role.EMPLOYEE.value),
            manager_id=optional_int(data.get("manager_id"), "Manager id"),
            dept_id=optional_int(data.get("dept_id"), "Department id"),
        )
        return ok(user_dto(user), "User created successfully", status=201)

    @app.put("/api/admin/users/<int:user_id>", endpoint="admin_update_user")
    @admin_only
    def update_user(user_id: int):
        data = json_body()
        user = container.user_service.update_user(
            user_id,
            full_name=data.get("full_name"),
            email=data.get("email"),
            role=data.get("role"),
            manager_id=optional_int(data.get("manager_id"), "Manager id"),
            dept_id=optional_int(data.get("dept_id"), "Department id"),
            is_active=data.get("is_active"),
        )
        return ok(user_dto(user), "User updated successfully")

    @app.get("/api/admin/departments", endpoint="admin_list_departments")
    @admin_only
    def list_departments():
        return ok([department_dto(d) for d in container.department_service.list_active()])

    @app.post("/api/admin/departments", endpoint="admin_create_department")
    @admin_only
    def create_department():
        data = json_body()
        dept = container.department_service.create(
            name=data.get("name", ""),
            description=data.get("description"),
            weekly_off_days=data.get("weekly_off_days"),
        )
        return ok(department_dto(dept), "Department created successfully", status=201)

    @app.put("/api/admin/departments/<int:dept_id>", endpoint="admin_update_department")
    @admin_only
    def update_department(dept_id: int):
        data = json_body()
        dept = container.department_service.update(
            dept_id,
            name=data.get("name", ""),
            description=data.get("description"),
            weekly_off_days=data.get("weekly_off_days"),
            is_active=bool(data.get("is_active", True)),
        )
        return ok(department_dto(dept), "Department updated successfully")

    @app.delete("/api/admin/departments/<int:dept_id>", endpoint="admin_delete_department")
    @admin_only
    def delete_department(dept_id: int):
        container.department_service.deactivate(dept_id)
        return ok(message="Department deleted successfully")
