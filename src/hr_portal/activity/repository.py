from __future__ import annotations

from typing import Protocol

from .model import ActivityEntry


class ActivityRepository(Protocol):
    def append(self, entry: ActivityEntry) -> int:
        raise NotImplementedError
