from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional, Sequence

from ..core.enums import ApprovalStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    request_id, user_id, leave_type, start_date, end_date, total_days, reason,
    status, approved_by, approved_at, rejection_reason, created_at
"""

_CLOSED = (ApprovalStatus.REJECTED.value, ApprovalStatus.CANCELLED.value)


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=Decimal(r["total_days"]),
        reason=r["reason"],
        status=ApprovalStatus(r["status"]),
        created_at=r["created_at"],
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_at=r.get("approved_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s{lock}",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        total_days: Decimal,
        reason: str,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    user_id, leave_type, start_date, end_date, total_days, reason, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    leave_type.value,
                    start_date,
                    end_date,
                    total_days,
                    reason,
                    ApprovalStatus.PENDING.value,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def has_overlap(self, user_id: int, start_date: date, end_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS hit
                FROM leave_requests
                WHERE user_id=%s
                  AND status NOT IN (%s, %s)
                  AND start_date <= %s AND end_date >= %s
                LIMIT 1
                FOR UPDATE
                """,
                (int(user_id), *_CLOSED, end_date, start_date),
            )
            return fetchone(cur) is not None

    def decide(
        self,
        *,
        request_id: int,
        status: ApprovalStatus,
        decided_by: int,
        decided_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(decided_by),
                    decided_at,
                    rejection_reason,
                    int(request_id),
                    ApprovalStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def cancel(self, request_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_requests SET status=%s WHERE request_id=%s AND status=%s",
                (ApprovalStatus.CANCELLED.value, int(request_id), ApprovalStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def pending_days_by_type(self, user_id: int, year: int) -> Dict[LeaveType, Decimal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_type, COALESCE(SUM(total_days), 0) AS days
                FROM leave_requests
                WHERE user_id=%s AND status=%s AND YEAR(start_date)=%s
                GROUP BY leave_type
                """,
                (int(user_id), ApprovalStatus.PENDING.value, int(year)),
            )
            return {LeaveType(r["leave_type"]): Decimal(r["days"]) for r in fetchall(cur)}

    def list_for_users(
        self,
        *,
        user_ids: Optional[Sequence[int]] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 500,
        oldest_first: bool = False,
    ) -> Sequence[LeaveRequest]:
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
            clauses.append("end_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("start_date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)
        order = "ASC" if oldest_first else "DESC"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at {order}, request_id {order}
                LIMIT %s
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_upcoming(self, user_id: int, today: date, limit: int = 5) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE user_id=%s AND status IN (%s, %s) AND start_date >= %s
                ORDER BY start_date
                LIMIT %s
                """,
                (int(user_id), ApprovalStatus.PENDING.value, ApprovalStatus.APPROVED.value, today, int(limit)),
            )
            return [_to_request(r) for r in fetchall(cur)]
