from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_as_conflict, fetchall, fetchone
from .model import PublicHoliday
from .repository import HolidayRepository


def _to_holiday(r: dict) -> PublicHoliday:
    return PublicHoliday(
        holiday_id=int(r["holiday_id"]),
        holiday_date=r["holiday_date"],
        name=r["name"],
        description=r.get("description"),
        year=int(r["year"]),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, holiday_id: int) -> Optional[PublicHoliday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_id, holiday_date, name, description, year, is_active FROM public_holidays WHERE holiday_id=%s",
                (int(holiday_id),),
            )
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def get_by_date(self, holiday_date: date) -> Optional[PublicHoliday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_id, holiday_date, name, description, year, is_active FROM public_holidays WHERE holiday_date=%s",
                (holiday_date,),
            )
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def exists_active_on(self, holiday_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS hit FROM public_holidays WHERE holiday_date=%s AND is_active=1 LIMIT 1",
                (holiday_date,),
            )
            return fetchone(cur) is not None

    def create(self, *, holiday_date: date, name: str, description: Optional[str]) -> int:
        with duplicate_key_as_conflict("A public holiday already exists for this date"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO public_holidays(holiday_date, name, description, year, is_active)
                    VALUES(%s,%s,%s,%s,1)
                    """,
                    (holiday_date, name, description, holiday_date.year),
                )
                return int(cur.lastrowid)

    def list_active_for_year(self, year: int) -> Sequence[PublicHoliday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, holiday_date, name, description, year, is_active
                FROM public_holidays
                WHERE year=%s AND is_active=1
                ORDER BY holiday_date
                """,
                (int(year),),
            )
            return [_to_holiday(r) for r in fetchall(cur)]

    def set_active(self, holiday_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE public_holidays SET is_active=%s WHERE holiday_id=%s",
                (int(bool(is_active)), int(holiday_id)),
            )
            return cur.rowcount > 0
