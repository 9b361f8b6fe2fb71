from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one attendance session per employee per day."""

    session_id: int
    employee_id: int
    work_date: date
    check_in: datetime
    status: AttendanceStatus
    check_out: Optional[datetime] = None
    work_hours: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.check_out is None


@dataclass(frozen=True)
class AttendanceSummary:
    """Read-model for the attendance overview."""

    present_days: int
    absent_days: int
    total_work_hours: float
    average_work_hours: float
