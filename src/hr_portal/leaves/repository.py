from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveCategory, LeaveStatus
from .model import BalanceAnomaly, LeaveBalance, LeaveRequest


class LeaveRepository(Protocol):
    # Leave requests
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
        raise NotImplementedError

    def get_request(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide_request(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        approver_id: int,
        approved_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Apply a decision only while the request is still PENDING.

        Returns False when another decision got there first.
        """

        raise NotImplementedError

    # Balances
    def get_balance(self, *, employee_id: int, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def create_balance(self, *, employee_id: int, year: int) -> None:
        """Create the default allotment; raises DuplicateRecordError if one exists."""

        raise NotImplementedError

    def deduct_balance(self, *, employee_id: int, year: int, category: LeaveCategory, days: int) -> bool:
        """Subtract days from one category, floored at zero.

        Returns False when no balance row exists for that employee and year.
        """

        raise NotImplementedError


class BalanceAnomalyRepository(Protocol):
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
        raise NotImplementedError

    def list_open(self) -> Sequence[BalanceAnomaly]:
        raise NotImplementedError

    def claim(self, anomaly_id: int, *, resolved_at: datetime) -> bool:
        """Mark an anomaly resolved only while it is still open.

        Returns False when another reconciliation run claimed it first.
        """

        raise NotImplementedError

    def release(self, anomaly_id: int) -> None:
        """Reopen a claimed anomaly whose deduction did not go through."""

        raise NotImplementedError
