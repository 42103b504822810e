from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, full_name, email, employee_code, password_hash, role, manager_id, dept_id, is_active"
_UPDATABLE = ("full_name", "email", "role", "manager_id", "dept_id", "is_active")


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        employee_code=row["employee_code"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        manager_id=row.get("manager_id"),
        dept_id=row.get("dept_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: Any) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("user_id", int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email", email)

    def get_by_employee_code(self, employee_code: str) -> Optional[User]:
        return self._get_one("employee_code", employee_code)

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        employee_code: str,
        password_hash: str,
        role: Role,
        manager_id: Optional[int],
        dept_id: Optional[int],
    ) -> int:
        with duplicate_key_as_conflict("A user with this email or employee code already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(full_name, email, employee_code, password_hash, role, manager_id, dept_id, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (full_name, email, employee_code, password_hash, role.value, manager_id, dept_id),
                )
                return int(cur.lastrowid)

    def update_user(self, user_id: int, **fields: Any) -> bool:
        sets: list[str] = []
        params: list[object] = []
        for column in _UPDATABLE:
            if column not in fields:
                continue
            value = fields[column]
            if isinstance(value, Role):
                value = value.value
            sets.append(f"{column}=%s")
            params.append(value)
        if not sets:
            return False

        params.append(int(user_id))
        with duplicate_key_as_conflict("A user with this email already exists"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE users SET {', '.join(sets)} WHERE user_id=%s", tuple(params))
                return cur.rowcount > 0

    def list_active(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE is_active=1 ORDER BY full_name")
            return [_to_user(r) for r in fetchall(cur)]

    def list_direct_reports(self, manager_id: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE manager_id=%s AND is_active=1
                ORDER BY employee_code
                """,
                (int(manager_id),),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def count_active_in_department(self, dept_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE dept_id=%s AND is_active=1", (int(dept_id),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def manager_of(self, user_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT manager_id FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            if not row or row.get("manager_id") is None:
                return None
            return int(row["manager_id"])
