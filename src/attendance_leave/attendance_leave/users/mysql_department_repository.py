from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .department_model import Department
from .department_repository import DepartmentRepository


def _split_days(value: Optional[str]) -> tuple[str, ...]:
    return tuple(d.strip() for d in (value or "").split(",") if d.strip())


def _to_department(row: dict) -> Department:
    return Department(
        dept_id=int(row["dept_id"]),
        name=row["name"],
        description=row.get("description"),
        weekly_off_days=_split_days(row.get("weekly_off_days")),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT dept_id, name, description, weekly_off_days, is_active FROM departments WHERE dept_id=%s",
                (int(dept_id),),
            )
            row = fetchone(cur)
            return _to_department(row) if row else None

    def list_active(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT dept_id, name, description, weekly_off_days, is_active
                FROM departments
                WHERE is_active=1
                ORDER BY name
                """
            )
            return [_to_department(r) for r in fetchall(cur)]

    def create(self, *, name: str, description: Optional[str], weekly_off_days: Sequence[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO departments(name, description, weekly_off_days, is_active)
                VALUES(%s,%s,%s,1)
                """,
                (name, description, ",".join(weekly_off_days)),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        dept_id: int,
        name: str,
        description: Optional[str],
        weekly_off_days: Sequence[str],
        is_active: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE departments
                SET name=%s, description=%s, weekly_off_days=%s, is_active=%s
                WHERE dept_id=%s
                """,
                (name, description, ",".join(weekly_off_days), int(bool(is_active)), int(dept_id)),
            )
            return cur.rowcount > 0

    def set_active(self, dept_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE departments SET is_active=%s WHERE dept_id=%s", (int(bool(is_active)), int(dept_id)))
            return cur.rowcount > 0
