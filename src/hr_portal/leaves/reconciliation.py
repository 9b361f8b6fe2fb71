from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..activity.service import ActivityLog
from ..app_logger import get_logger
from ..common.datetime_utils import now_local
from ..core.enums import EntityType, LeaveStatus
from .model import BalanceAnomaly
from .repository import BalanceAnomalyRepository, LeaveRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReconciliationReport:
    resolved: list[BalanceAnomaly] = field(default_factory=list)
    still_open: list[BalanceAnomaly] = field(default_factory=list)


class LeaveReconciliationService:
    """Operator-run job that applies deductions left behind by approvals."""

    def __init__(
        self,
        leaves: LeaveRepository,
        anomalies: BalanceAnomalyRepository,
        activity: ActivityLog,
    ):
        self._leaves = leaves
        self._anomalies = anomalies
        self._activity = activity

    def list_open(self) -> Sequence[BalanceAnomaly]:
        return self._anomalies.list_open()

    def reconcile(self, *, performed_by: Optional[int] = None, now: Optional[datetime] = None) -> ReconciliationReport:
        """Apply each open anomaly at most once.

        An anomaly is claimed (marked resolved) before its deduction runs and
        reopened when the deduction does not go through.
        """

        now = now or now_local()
        report = ReconciliationReport()

        for anomaly in self._anomalies.list_open():
            leave = self._leaves.get_request(anomaly.leave_id)
            if not leave or leave.status != LeaveStatus.APPROVED:
                logger.warning("anomaly %s refers to leave %s which is not approved", anomaly.anomaly_id, anomaly.leave_id)
                report.still_open.append(anomaly)
                continue

            try:
                claimed = self._anomalies.claim(anomaly.anomaly_id, resolved_at=now)
            except Exception:
                logger.exception("could not claim anomaly %s", anomaly.anomaly_id)
                report.still_open.append(anomaly)
                continue
            if not claimed:
                logger.info("anomaly %s already handled by another run", anomaly.anomaly_id)
                continue

            if self._apply(anomaly):
                report.resolved.append(anomaly)
                self._activity.record(
                    employee_id=performed_by,
                    action=f"Reconciled leave balance ({anomaly.days} {anomaly.category.value} day(s))",
                    entity_type=EntityType.LEAVE,
                    entity_id=anomaly.leave_id,
                    now=now,
                )
            else:
                self._release(anomaly)
                report.still_open.append(anomaly)

        logger.info(
            "balance reconciliation finished: resolved=%d still_open=%d",
            len(report.resolved), len(report.still_open),
        )
        return report

    def _apply(self, anomaly: BalanceAnomaly) -> bool:
        try:
            applied = self._leaves.deduct_balance(
                employee_id=anomaly.employee_id,
                year=anomaly.year,
                category=anomaly.category,
                days=anomaly.days,
            )
        except Exception:
            logger.exception("reconciliation of anomaly %s failed", anomaly.anomaly_id)
            return False

        if not applied:
            logger.warning(
                "anomaly %s still open: no %s balance for employee %s",
                anomaly.anomaly_id, anomaly.year, anomaly.employee_id,
            )
        return applied

    def _release(self, anomaly: BalanceAnomaly) -> None:
        try:
            self._anomalies.release(anomaly.anomaly_id)
        except Exception:
            logger.exception(
                "anomaly %s is marked resolved but its deduction was not applied; reopen it manually",
                anomaly.anomaly_id,
            )
