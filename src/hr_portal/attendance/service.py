from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..activity.service import ActivityLog
from ..common.datetime_utils import elapsed_hours, now_local
from ..core.enums import AttendanceStatus, EntityType
from ..core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    DuplicateRecordError,
    NoOpenSession,
    ValidationError,
)
from .model import AttendanceSession, AttendanceSummary
from .repository import AttendanceRepository


class AttendanceService:
    """Attendance sessions: NoSession -> CheckedIn -> CheckedOut (terminal)."""

    def __init__(self, attendance: AttendanceRepository, activity: ActivityLog):
        self._attendance = attendance
        self._activity = activity

    def check_in(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceSession:
        now = now or now_local()
        today = now.date()

        if self._attendance.get_for_employee_and_date(employee_id, today):
            raise AlreadyCheckedIn()

        try:
            session_id = self._attendance.create_session(
                employee_id=int(employee_id),
                work_date=today,
                check_in=now,
                status=AttendanceStatus.PRESENT,
            )
        except DuplicateRecordError:
            # A concurrent check-in won the unique (employee, date) key.
            raise AlreadyCheckedIn()

        self._activity.record(
            employee_id=int(employee_id),
            action="Checked in",
            entity_type=EntityType.ATTENDANCE,
            entity_id=session_id,
            now=now,
        )
        return AttendanceSession(
            session_id=session_id,
            employee_id=int(employee_id),
            work_date=today,
            check_in=now,
            status=AttendanceStatus.PRESENT,
        )

    def check_out(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceSession:
        now = now or now_local()

        record = self._attendance.get_for_employee_and_date(employee_id, now.date())
        if not record:
            raise NoOpenSession()
        if not record.is_open:
            raise AlreadyCheckedOut()
        if now < record.check_in:
            raise ValidationError("Check-out time cannot be earlier than check-in time")

        work_hours = elapsed_hours(record.check_in, now)
        if not self._attendance.close_session(session_id=record.session_id, check_out=now, work_hours=work_hours):
            raise AlreadyCheckedOut()

        self._activity.record(
            employee_id=int(employee_id),
            action="Checked out",
            entity_type=EntityType.ATTENDANCE,
            entity_id=record.session_id,
            now=now,
        )
        return replace(record, check_out=now, work_hours=work_hours)

    def get_today(self, employee_id: int, *, now: Optional[datetime] = None) -> Optional[AttendanceSession]:
        """Get today's attendance session for an employee"""
        now = now or now_local()
        return self._attendance.get_for_employee_and_date(employee_id, now.date())

    def list_sessions(self, employee_id: Optional[int], *, start: date, end: date) -> Sequence[AttendanceSession]:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        return self._attendance.list_sessions(start_date=start, end_date=end, employee_id=employee_id)

    @staticmethod
    def summarize(sessions: Iterable[AttendanceSession]) -> AttendanceSummary:
        sessions = list(sessions)
        present = [s for s in sessions if s.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)]
        absent = [s for s in sessions if s.status == AttendanceStatus.ABSENT]
        hours = [s.work_hours for s in sessions if s.work_hours is not None]

        total = round(sum(hours), 2)
        average = round(total / len(hours), 2) if hours else 0.0
        return AttendanceSummary(
            present_days=len(present),
            absent_days=len(absent),
            total_work_hours=total,
            average_work_hours=average,
        )
