from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TaskPriority, TaskStatus
from .model import Task, TaskComment


class TaskRepository(Protocol):
    def get_last_code(self) -> Optional[str]:
        raise NotImplementedError

    def create_task(
        self,
        *,
        task_code: str,
        title: str,
        description: Optional[str],
        assignee_id: int,
        assigner_id: int,
        priority: TaskPriority,
        due_date: Optional[date],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_tasks(
        self,
        *,
        assignee_id: Optional[int] = None,
        status: Optional[TaskStatus] = None,
        limit: int = 200,
    ) -> Sequence[Task]:
        raise NotImplementedError

    def update_status(
        self,
        *,
        task_id: int,
        expected_status: TaskStatus,
        status: TaskStatus,
        progress: int,
        completed_at: Optional[datetime] = None,
    ) -> bool:
        """Move a task only while it is still in expected_status."""

        raise NotImplementedError

    # Comments
    def add_comment(self, *, task_id: int, author_id: int, text: str, created_at: datetime) -> int:
        raise NotImplementedError

    def list_comments(self, task_id: int) -> Sequence[TaskComment]:
        """Oldest first."""

        raise NotImplementedError
