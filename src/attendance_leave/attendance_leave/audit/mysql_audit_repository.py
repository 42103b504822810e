from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .repository import AuditLog


class MySQLAuditLog(AuditLog):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(
        self,
        *,
        user_id: Optional[int],
        action: str,
        entity_type: str,
        entity_id: str,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(user_id, action, entity_type, entity_id, old_value, new_value)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (user_id, action[:100], entity_type[:100], str(entity_id)[:100], old_value, new_value),
            )
