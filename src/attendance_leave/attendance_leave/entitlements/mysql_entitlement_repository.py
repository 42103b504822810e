from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchone
from .model import LeaveEntitlement
from .repository import EntitlementRepository

_BALANCE_COLUMN = {
    LeaveType.CASUAL_LEAVE: "casual_balance",
    LeaveType.EARNED_LEAVE: "earned_balance",
    LeaveType.COMPENSATORY_OFF: "comp_off_balance",
}


class MySQLEntitlementRepository(EntitlementRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: int, year: int, *, for_update: bool = False) -> Optional[LeaveEntitlement]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT entitlement_id, user_id, year, casual_balance, earned_balance, comp_off_balance
                FROM leave_entitlements
                WHERE user_id=%s AND year=%s{lock}
                """,
                (int(user_id), int(year)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return LeaveEntitlement(
                entitlement_id=int(r["entitlement_id"]),
                user_id=int(r["user_id"]),
                year=int(r["year"]),
                casual=Decimal(r["casual_balance"]),
                earned=Decimal(r["earned_balance"]),
                comp_off=Decimal(r["comp_off_balance"]),
            )

    def upsert(self, *, user_id: int, year: int, casual: Decimal, earned: Decimal, comp_off: Decimal) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_entitlements(user_id, year, casual_balance, earned_balance, comp_off_balance)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    casual_balance=VALUES(casual_balance),
                    earned_balance=VALUES(earned_balance),
                    comp_off_balance=VALUES(comp_off_balance)
                """,
                (int(user_id), int(year), casual, earned, comp_off),
            )

    def create(self, *, user_id: int, year: int, casual: Decimal, earned: Decimal, comp_off: Decimal) -> int:
        with duplicate_key_as_conflict("Leave entitlement already exists for this year"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO leave_entitlements(user_id, year, casual_balance, earned_balance, comp_off_balance)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(user_id), int(year), casual, earned, comp_off),
                )
                return int(cur.lastrowid)

    def adjust(self, *, entitlement_id: int, leave_type: LeaveType, delta: Decimal) -> bool:
        column = _BALANCE_COLUMN[leave_type]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE leave_entitlements SET {column}={column}+%s WHERE entitlement_id=%s",
                (delta, int(entitlement_id)),
            )
            return cur.rowcount > 0
