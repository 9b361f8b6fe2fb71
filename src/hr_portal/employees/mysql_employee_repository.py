from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import EmployeeStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where_clause
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, employee_code, full_name, email, password_hash, role, status,
    department, position, joining_date
"""


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r["employee_code"],
        full_name=r["full_name"],
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        status=EmployeeStatus(r["status"]),
        department=r.get("department"),
        position=r.get("position"),
        joining_date=r.get("joining_date"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_code=%s", (employee_code,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_last_code(self) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_code FROM employees ORDER BY employee_id DESC LIMIT 1")
            row = fetchone(cur)
            return row["employee_code"] if row else None

    def create_employee(
        self,
        *,
        employee_code: str,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        position: Optional[str],
        joining_date: Optional[date],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(employee_code, full_name, email, password_hash, role, status,
                                      department, position, joining_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee_code,
                    full_name,
                    email,
                    password_hash,
                    role.value,
                    EmployeeStatus.ACTIVE.value,
                    department,
                    position,
                    joining_date,
                ),
            )
            return int(cur.lastrowid)

    def set_status(self, employee_id: int, *, status: EmployeeStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET status=%s WHERE employee_id=%s",
                (status.value, int(employee_id)),
            )
            return cur.rowcount > 0

    def list_all(self, *, status: Optional[EmployeeStatus] = None) -> Sequence[Employee]:
        where, params = where_clause({"status": status})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {where} ORDER BY full_name",
                tuple(params),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]
