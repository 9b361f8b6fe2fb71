"""Apply leave-balance deductions that failed at approval time.

Run it after fixing whatever made the deduction fail (usually a missing
balance row for the year). Anomalies that still cannot be applied stay open.
"""

from __future__ import annotations

import importlib

from dotenv import load_dotenv

from hr_portal.app_logger import setup_logging
from hr_portal.config import get_settings_module
from hr_portal.container import build_container


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", None))

    container = build_container(db_config=dict(settings.DB_CONFIG))
    report = container.reconciliation_service.reconcile()

    for anomaly in report.still_open:
        print(
            f"OPEN: anomaly #{anomaly.anomaly_id} leave #{anomaly.leave_id} "
            f"employee #{anomaly.employee_id} {anomaly.category.value} x{anomaly.days} ({anomaly.reason})"
        )
    print(f"OK: resolved={len(report.resolved)} still_open={len(report.still_open)}")


if __name__ == "__main__":
    main()
