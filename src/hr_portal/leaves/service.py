from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..activity.service import ActivityLog
from ..app_logger import get_logger
from ..common.datetime_utils import inclusive_days, now_local
from ..common.validators import optional_text, require_enum, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import EntityType, LeaveCategory, LeaveStatus
from ..core.exceptions import (
    InvalidDateRange,
    LeaveNotFound,
    NotPending,
    RejectionReasonRequired,
    ValidationError,
)
from ..employees.identity import Identity, require_admin
from .model import LeaveBalance, LeaveRequest
from .repository import BalanceAnomalyRepository, LeaveRepository

logger = get_logger(__name__)


class LeaveService:
    """Leave requests and their yearly entitlement balances.

    Balance is deducted when a request is approved, never when it is
    submitted, so pending requests do not reserve days. Approval and
    deduction are two separate store writes: when the deduction does not
    happen the request stays approved and the missing deduction is written
    to the anomaly outbox for reconciliation.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        anomalies: BalanceAnomalyRepository,
        activity: ActivityLog,
    ):
        self._leaves = leaves
        self._anomalies = anomalies
        self._activity = activity

    def submit(
        self,
        *,
        employee_id: int,
        category: LeaveCategory | str,
        from_date: date,
        to_date: date,
        reason: str,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = now or now_local()
        category = require_enum(LeaveCategory, category, "leave type")

        total_days = inclusive_days(from_date, to_date)
        if total_days < 1:
            raise InvalidDateRange()
        reason = require_non_empty(reason, "Reason")

        leave_id = self._leaves.create_request(
            employee_id=int(employee_id),
            category=category,
            from_date=from_date,
            to_date=to_date,
            total_days=total_days,
            reason=reason,
            created_at=now,
        )
        self._activity.record(
            employee_id=int(employee_id),
            action="Applied for leave",
            entity_type=EntityType.LEAVE,
            entity_id=leave_id,
            now=now,
        )
        return self.get(leave_id)

    def get(self, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get_request(int(leave_id))
        if not leave:
            raise LeaveNotFound()
        return leave

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(employee_id=employee_id, status=status, limit=limit)

    def get_balance(self, employee_id: int, year: int) -> Optional[LeaveBalance]:
        """None means the balance was never initialized ("contact HR")."""

        return self._leaves.get_balance(employee_id=int(employee_id), year=int(year))

    def decide(
        self,
        leave_id: int,
        *,
        approver: Identity,
        outcome: LeaveStatus | str,
        rejection_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        require_admin(approver, "Only administrators can approve or reject leave")
        outcome = require_enum(LeaveStatus, outcome, "decision")
        if outcome == LeaveStatus.PENDING:
            raise ValidationError("Decision must be approved or rejected")
        now = now or now_local()

        leave = self.get(leave_id)
        if leave.status != LeaveStatus.PENDING:
            raise NotPending()

        reason = None
        if outcome == LeaveStatus.REJECTED:
            reason = optional_text(rejection_reason, "Rejection reason")
            if not reason:
                raise RejectionReasonRequired()

        decided = self._leaves.decide_request(
            leave_id=leave.leave_id,
            status=outcome,
            approver_id=approver.employee_id,
            approved_at=now,
            rejection_reason=reason,
        )
        if not decided:
            # Another decision won the status-guarded update.
            raise NotPending()

        leave = replace(
            leave,
            status=outcome,
            approver_id=approver.employee_id,
            approved_at=now,
            rejection_reason=reason,
        )

        if outcome == LeaveStatus.APPROVED and leave.category.has_balance:
            self._deduct_balance(leave, year=now.year, now=now)

        self._activity.record(
            employee_id=approver.employee_id,
            action=f"Leave {outcome.value}",
            entity_type=EntityType.LEAVE,
            entity_id=leave.leave_id,
            now=now,
        )
        return leave

    def _deduct_balance(self, leave: LeaveRequest, *, year: int, now: datetime) -> None:
        try:
            applied = self._leaves.deduct_balance(
                employee_id=leave.employee_id,
                year=year,
                category=leave.category,
                days=leave.total_days,
            )
        except Exception as e:
            logger.exception("balance deduction failed for approved leave %s", leave.leave_id)
            self._flag_anomaly(leave, year=year, reason=f"Balance update failed: {e}", now=now)
            return

        if not applied:
            self._flag_anomaly(leave, year=year, reason=f"No {year} leave balance initialized", now=now)

    def _flag_anomaly(self, leave: LeaveRequest, *, year: int, reason: str, now: datetime) -> None:
        logger.error(
            "leave %s approved but %s %s day(s) not deducted for employee %s/%s: %s",
            leave.leave_id, leave.total_days, leave.category.value, leave.employee_id, year, reason,
        )
        try:
            self._anomalies.record(
                leave_id=leave.leave_id,
                employee_id=leave.employee_id,
                year=year,
                category=leave.category,
                days=leave.total_days,
                reason=reason,
                created_at=now,
            )
        except Exception:
            logger.exception(
                "could not record balance anomaly for leave %s; manual reconciliation required",
                leave.leave_id,
            )
