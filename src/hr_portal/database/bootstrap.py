from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from ..app_logger import get_logger
from ..core.constants import (
    BOOTSTRAP_ADMIN_CODE,
    BOOTSTRAP_ADMIN_EMAIL,
    BOOTSTRAP_ADMIN_PASSWORD,
    DEFAULT_LEAVE_ALLOTMENT,
)
from ..core.enums import EmployeeStatus, EntityType, LeaveCategory, Role
from .connection import DBConfig

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).resolve().with_name("schema.sql")


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
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
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied to %s", target.describe())


def ensure_admin(db_config: dict) -> int:
    """Create the bootstrap administrator (and its leave balance) if missing.

    Returns the administrator's employee_id either way.
    """

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT employee_id FROM employees WHERE employee_code=%s", (BOOTSTRAP_ADMIN_CODE,))
        existing = cur.fetchone()
        if existing:
            logger.info("bootstrap admin %s already exists", BOOTSTRAP_ADMIN_CODE)
            return int(existing["employee_id"])

        cur.execute(
            """
            INSERT INTO employees(employee_code, full_name, email, password_hash, role, status,
                                  department, position, joining_date)
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                BOOTSTRAP_ADMIN_CODE,
                "System Administrator",
                BOOTSTRAP_ADMIN_EMAIL,
                generate_password_hash(BOOTSTRAP_ADMIN_PASSWORD),
                Role.ADMIN.value,
                EmployeeStatus.ACTIVE.value,
                "IT",
                "HR Manager",
                date.today(),
            ),
        )
        admin_id = int(cur.lastrowid)

        cur.execute(
            """
            INSERT INTO leave_balances(employee_id, year, sick, casual, earned)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (
                admin_id,
                date.today().year,
                DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.SICK],
                DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.CASUAL],
                DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.EARNED],
            ),
        )
        cur.execute(
            """
            INSERT INTO activity_logs(employee_id, action, entity_type, entity_id, created_at)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (admin_id, "Admin account initialized", EntityType.SYSTEM.value, admin_id, datetime.now()),
        )
        conn.commit()
        logger.info("bootstrap admin %s created", BOOTSTRAP_ADMIN_CODE)
        return admin_id
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
