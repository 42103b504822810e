from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ApprovalStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, work_date, login_time, logout_time,
    is_weekend, is_public_holiday, status, approved_by, approved_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        login_time=r["login_time"],
        logout_time=r.get("logout_time"),
        is_weekend=bool(r["is_weekend"]),
        is_public_holiday=bool(r["is_public_holiday"]),
        status=ApprovalStatus(r["status"]),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_at=r.get("approved_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE attendance_id=%s{lock}",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE user_id=%s AND work_date=%s{lock}",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        login_time: datetime,
        logout_time: Optional[datetime],
        is_weekend: bool,
        is_public_holiday: bool,
        status: ApprovalStatus,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> int:
        with duplicate_key_as_conflict("Attendance already recorded for this date"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(
                        user_id, work_date, login_time, logout_time,
                        is_weekend, is_public_holiday, status, approved_by, approved_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(user_id),
                        work_date,
                        login_time,
                        logout_time,
                        int(bool(is_weekend)),
                        int(bool(is_public_holiday)),
                        status.value,
                        approved_by,
                        approved_at,
                    ),
                )
                return int(cur.lastrowid)

    def set_logout(self, *, attendance_id: int, logout_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance SET logout_time=%s WHERE attendance_id=%s AND logout_time IS NULL",
                (logout_time, int(attendance_id)),
            )
            return cur.rowcount > 0

    def decide(self, *, attendance_id: int, status: ApprovalStatus, decided_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE attendance_id=%s AND status=%s
                """,
                (status.value, int(decided_by), decided_at, int(attendance_id), ApprovalStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def list_for_users(
        self,
        *,
        user_ids: Optional[Sequence[int]] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 500,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if user_ids is not None:
            if not user_ids:
                return []
            clauses.append(f"user_id IN ({', '.join(['%s'] * len(user_ids))})")
            params.extend(int(u) for u in user_ids)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE {where}
                ORDER BY work_date DESC, login_time DESC
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
