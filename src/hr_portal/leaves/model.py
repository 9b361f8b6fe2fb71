from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveCategory, LeaveStatus


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    employee_id: int
    category: LeaveCategory
    from_date: date
    to_date: date
    total_days: int
    reason: str
    status: LeaveStatus
    created_at: datetime
    approver_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class LeaveBalance:
    """Remaining paid leave days of one employee for one calendar year."""

    employee_id: int
    year: int
    sick: int
    casual: int
    earned: int

    def remaining(self, category: LeaveCategory) -> Optional[int]:
        """Days left in a category; None for categories without a balance."""

        if not category.has_balance:
            return None
        return int(getattr(self, category.value))


@dataclass(frozen=True)
class BalanceAnomaly:
    """An approval that committed while its balance deduction did not.

    Rows stay open until reconciliation applies the deduction.
    """

    anomaly_id: int
    leave_id: int
    employee_id: int
    year: int
    category: LeaveCategory
    days: int
    reason: str
    created_at: datetime
    resolved_at: Optional[datetime] = None
