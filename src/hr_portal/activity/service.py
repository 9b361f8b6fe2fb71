from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..app_logger import get_logger
from ..common.datetime_utils import now_local
from ..core.enums import EntityType
from .model import ActivityEntry
from .repository import ActivityRepository

logger = get_logger(__name__)


class ActivityLog:
    """Write-only audit sink shared by every ledger.

    A failed audit write is logged with its traceback and never undoes or
    fails the ledger operation it describes.
    """

    def __init__(self, activity: ActivityRepository):
        self._activity = activity

    def record(
        self,
        *,
        employee_id: Optional[int],
        action: str,
        entity_type: EntityType,
        entity_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> None:
        entry = ActivityEntry(
            employee_id=employee_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            created_at=now or now_local(),
        )
        try:
            self._activity.append(entry)
        except Exception:
            logger.exception(
                "activity log write failed: employee=%s action=%r entity=%s/%s",
                employee_id, action, entity_type.value, entity_id,
            )
