from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import DuplicateRecordError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except IntegrityError as e:
        conn.rollback()
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateRecordError(str(e)) from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_float(value: Any) -> Optional[float]:
    """MySQL DECIMAL columns come back as Decimal."""

    if value is None:
        return None
    return float(value)


def where_clause(filters: Dict[str, Any]) -> tuple[str, list]:
    """Build ``a=%s AND b=%s`` from the non-None filters."""

    clauses = ["1=1"]
    params: list[object] = []
    for column, value in filters.items():
        if value is None:
            continue
        clauses.append(f"{column}=%s")
        params.append(value.value if hasattr(value, "value") else value)
    return " AND ".join(clauses), params
