from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EntityType


@dataclass(frozen=True)
class ActivityEntry:
    """Audit trail row. Append-only, never read back by business logic."""

    employee_id: Optional[int]
    action: str
    entity_type: EntityType
    created_at: datetime
    entity_id: Optional[int] = None
