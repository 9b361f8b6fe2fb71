from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceSession


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def create_session(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in: datetime,
        status: AttendanceStatus,
    ) -> int:
        """Insert a session; raises DuplicateRecordError if (employee, date) exists."""

        raise NotImplementedError

    def close_session(self, *, session_id: int, check_out: datetime, work_hours: float) -> bool:
        """Set check-out and work hours only while check-out is still empty."""

        raise NotImplementedError

    def list_sessions(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        raise NotImplementedError
