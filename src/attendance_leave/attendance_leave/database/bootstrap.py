from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "attendance_db")),
    )


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def _apply_sql_file(db_config: dict, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _apply_sql_file(db_config, schema_path)
    logger.info("Applied schema from %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _apply_sql_file(db_config, seed_path)
    logger.info("Applied seed data from %s", seed_path)


# (full_name, email, employee_code, password, role, manager email)
DEMO_USERS = (
    ("System Administrator", "admin@company.com", "EMP001", "admin123", "Administrator", None),
    ("Maria Manager", "manager@company.com", "EMP002", "manager123", "Manager", None),
    ("Eric Employee", "employee@company.com", "EMP003", "employee123", "Employee", "manager@company.com"),
)


def ensure_demo_users(db_config: dict, *, year: Optional[int] = None) -> None:
    """Create (or reset) the demo accounts and give them entitlements for ``year``."""

    year = year or date.today().year
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT dept_id FROM departments WHERE name=%s", ("Engineering",))
        row = cur.fetchone()
        if not row:
            raise RuntimeError("Missing departments row for name=Engineering (apply seed.sql first)")
        dept_id = int(row["dept_id"])

        def user_id_for(email: str) -> Optional[int]:
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            found = cur.fetchone()
            return int(found["user_id"]) if found else None

        for full_name, email, code, password, role, manager_email in DEMO_USERS:
            manager_id = user_id_for(manager_email) if manager_email else None
            password_hash = generate_password_hash(password)
            existing = user_id_for(email)
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, password_hash=%s, role=%s, manager_id=%s, dept_id=%s, is_active=1
                    WHERE user_id=%s
                    """,
                    (full_name, password_hash, role, manager_id, dept_id, existing),
                )
                user_id = existing
            else:
                cur.execute(
                    """
                    INSERT INTO users (full_name, email, employee_code, password_hash, role, manager_id, dept_id)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    """,
                    (full_name, email, code, password_hash, role, manager_id, dept_id),
                )
                user_id = int(cur.lastrowid)

            cur.execute(
                """
                INSERT IGNORE INTO leave_entitlements(user_id, year, casual_balance, earned_balance, comp_off_balance)
                VALUES (%s, %s, 12, 15, 0)
                """,
                (user_id, int(year)),
            )

        conn.commit()
        logger.info("Demo users ready (%d accounts, year %s)", len(DEMO_USERS), year)
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
