from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    task_id: int
    task_code: str
    title: str
    description: Optional[str]
    assignee_id: int
    assigner_id: int
    priority: TaskPriority
    status: TaskStatus
    progress: int
    created_at: datetime
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)


@dataclass(frozen=True)
class TaskComment:
    comment_id: int
    task_id: int
    author_id: int
    text: str
    created_at: datetime
