from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone
from .model import AttendanceSession
from .repository import AttendanceRepository

_COLUMNS = "session_id, employee_id, work_date, check_in, check_out, work_hours, status"


def _row_to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in=r["check_in"],
        check_out=r.get("check_out"),
        work_hours=as_float(r.get("work_hours")),
        status=AttendanceStatus(r["status"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def create_session(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in: datetime,
        status: AttendanceStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(employee_id, work_date, check_in, status)
                VALUES(%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, check_in, status.value),
            )
            return int(cur.lastrowid)

    def close_session(self, *, session_id: int, check_out: datetime, work_hours: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET check_out=%s, work_hours=%s
                WHERE session_id=%s AND check_out IS NULL
                """,
                (check_out, work_hours, int(session_id)),
            )
            return cur.rowcount > 0

    def list_sessions(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions
                WHERE {where}
                ORDER BY work_date DESC, employee_id ASC
                """,
                tuple(params),
            )
            return [_row_to_session(r) for r in fetchall(cur)]
