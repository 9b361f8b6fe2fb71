from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.constants import DEFAULT_LEAVE_ALLOTMENT
from ..core.enums import LeaveCategory, LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where_clause
from .model import BalanceAnomaly, LeaveBalance, LeaveRequest
from .repository import BalanceAnomalyRepository, LeaveRepository

# Whitelisted balance columns, never interpolate user input into SQL.
_BALANCE_COLUMNS = {
    LeaveCategory.SICK: "sick",
    LeaveCategory.CASUAL: "casual",
    LeaveCategory.EARNED: "earned",
}

_REQUEST_COLUMNS = """
    leave_id, employee_id, category, from_date, to_date, total_days, reason, status,
    created_at, approver_id, approved_at, rejection_reason
"""


def _row_to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        category=LeaveCategory(r["category"]),
        from_date=r["from_date"],
        to_date=r["to_date"],
        total_days=int(r["total_days"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        approver_id=r.get("approver_id"),
        approved_at=r.get("approved_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Leave requests --------
    def create_request(
        self,
        *,
        employee_id: int,
        category: LeaveCategory,
        from_date: date,
        to_date: date,
        total_days: int,
        reason: str,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(employee_id, category, from_date, to_date, total_days,
                                           reason, status, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    category.value,
                    from_date,
                    to_date,
                    int(total_days),
                    reason,
                    LeaveStatus.PENDING.value,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_request(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_REQUEST_COLUMNS} FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        where, params = where_clause({"employee_id": employee_id, "status": status})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC, leave_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def decide_request(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        approver_id: int,
        approved_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=%s, approved_at=%s, rejection_reason=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(approver_id),
                    approved_at,
                    rejection_reason,
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    # -------- Balances --------
    def get_balance(self, *, employee_id: int, year: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, year, sick, casual, earned
                FROM leave_balances
                WHERE employee_id=%s AND year=%s
                """,
                (int(employee_id), int(year)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return LeaveBalance(
                employee_id=int(r["employee_id"]),
                year=int(r["year"]),
                sick=int(r["sick"]),
                casual=int(r["casual"]),
                earned=int(r["earned"]),
            )

    def create_balance(self, *, employee_id: int, year: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(employee_id, year, sick, casual, earned)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    int(year),
                    DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.SICK],
                    DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.CASUAL],
                    DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.EARNED],
                ),
            )

    def deduct_balance(self, *, employee_id: int, year: int, category: LeaveCategory, days: int) -> bool:
        column = _BALANCE_COLUMNS[category]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE leave_balances
                SET {column} = GREATEST({column} - %s, 0)
                WHERE employee_id=%s AND year=%s
                """,
                (int(days), int(employee_id), int(year)),
            )
            if cur.rowcount > 0:
                return True

            # rowcount is 0 both for a missing row and for a balance already at zero
            cur.execute(
                "SELECT 1 AS found FROM leave_balances WHERE employee_id=%s AND year=%s",
                (int(employee_id), int(year)),
            )
            return fetchone(cur) is not None


class MySQLBalanceAnomalyRepository(BalanceAnomalyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(
        self,
        *,
        leave_id: int,
        employee_id: int,
        year: int,
        category: LeaveCategory,
        days: int,
        reason: str,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO balance_anomalies(leave_id, employee_id, year, category, days, reason, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(leave_id), int(employee_id), int(year), category.value, int(days), reason[:255], created_at),
            )
            return int(cur.lastrowid)

    def list_open(self) -> Sequence[BalanceAnomaly]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT anomaly_id, leave_id, employee_id, year, category, days, reason, created_at, resolved_at
                FROM balance_anomalies
                WHERE resolved_at IS NULL
                ORDER BY anomaly_id ASC
                """
            )
            return [
                BalanceAnomaly(
                    anomaly_id=int(r["anomaly_id"]),
                    leave_id=int(r["leave_id"]),
                    employee_id=int(r["employee_id"]),
                    year=int(r["year"]),
                    category=LeaveCategory(r["category"]),
                    days=int(r["days"]),
                    reason=r["reason"],
                    created_at=r["created_at"],
                    resolved_at=r.get("resolved_at"),
                )
                for r in fetchall(cur)
            ]

    def claim(self, anomaly_id: int, *, resolved_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE balance_anomalies SET resolved_at=%s WHERE anomaly_id=%s AND resolved_at IS NULL",
                (resolved_at, int(anomaly_id)),
            )
            return cur.rowcount > 0

    def release(self, anomaly_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE balance_anomalies SET resolved_at=NULL WHERE anomaly_id=%s",
                (int(anomaly_id),),
            )
