from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..activity.service import ActivityLog
from ..common.codes import next_sequential_code
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_enum, require_non_empty, require_percentage, require_text
from ..core.constants import DEFAULT_LIST_LIMIT, DEFAULT_START_PROGRESS, TASK_CODE_PREFIX
from ..core.enums import EntityType, TaskPriority, TaskStatus
from ..core.exceptions import (
    AuthorizationError,
    DuplicateRecordError,
    EmptyComment,
    IllegalTransition,
    StateConflictError,
    TaskNotFound,
    ValidationError,
)
from ..employees.identity import Identity, require_admin
from ..employees.repository import EmployeeRepository
from .model import Task, TaskComment
from .repository import TaskRepository

# Normal workflow path; CANCELLED is handled by cancel().
_FORWARD = {
    TaskStatus.ASSIGNED: TaskStatus.IN_PROGRESS,
    TaskStatus.IN_PROGRESS: TaskStatus.COMPLETED,
}


class TaskService:
    def __init__(self, tasks: TaskRepository, employees: EmployeeRepository, activity: ActivityLog):
        self._tasks = tasks
        self._employees = employees
        self._activity = activity

    def create(
        self,
        *,
        assigner: Identity,
        title: str,
        assignee_id: int,
        description: Optional[str] = None,
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        due_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Task:
        require_admin(assigner, "Only administrators can create tasks")
        now = now or now_local()

        title = require_non_empty(title, "Title")
        priority = require_enum(TaskPriority, priority, "priority")

        assignee = self._employees.get_by_id(int(assignee_id))
        if not assignee or not assignee.is_active:
            raise ValidationError("Assignee must be an active employee")

        code = next_sequential_code(TASK_CODE_PREFIX, self._tasks.get_last_code())
        try:
            task_id = self._tasks.create_task(
                task_code=code,
                title=title,
                description=optional_text(description, "Description"),
                assignee_id=assignee.employee_id,
                assigner_id=assigner.employee_id,
                priority=priority,
                due_date=due_date,
                created_at=now,
            )
        except DuplicateRecordError:
            raise StateConflictError("Task code already taken, please retry")

        self._activity.record(
            employee_id=assigner.employee_id,
            action="Created task",
            entity_type=EntityType.TASK,
            entity_id=task_id,
            now=now,
        )
        return self.get(task_id)

    def get(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(int(task_id))
        if not task:
            raise TaskNotFound()
        return task

    def list_tasks(
        self,
        *,
        assignee_id: Optional[int] = None,
        status: Optional[TaskStatus] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[Task]:
        return self._tasks.list_tasks(assignee_id=assignee_id, status=status, limit=limit)

    def advance(
        self,
        task_id: int,
        *,
        actor: Identity,
        new_status: TaskStatus | str,
        progress: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Task:
        """Move a task one step along assigned -> in_progress -> completed."""

        now = now or now_local()
        new_status = require_enum(TaskStatus, new_status, "status")
        task = self.get(task_id)

        if task.assignee_id != actor.employee_id:
            raise AuthorizationError("Only the assignee can update this task")
        if _FORWARD.get(task.status) != new_status:
            raise IllegalTransition(
                f"Cannot move task from {task.status.value} to {new_status.value}"
            )

        completed_at = None
        if new_status == TaskStatus.COMPLETED:
            progress = 100
            completed_at = now
        elif progress is None:
            progress = DEFAULT_START_PROGRESS
        else:
            progress = require_percentage(progress, "Progress")
            if not 0 < progress < 100:
                raise ValidationError("Progress of a started task must be between 1 and 99")

        return self._move(task, actor=actor, status=new_status, progress=progress, completed_at=completed_at, now=now)

    def cancel(self, task_id: int, *, actor: Identity, now: Optional[datetime] = None) -> Task:
        """Admin-only side exit from any non-terminal status."""

        require_admin(actor, "Only administrators can cancel tasks")
        now = now or now_local()
        task = self.get(task_id)
        if task.is_terminal:
            raise IllegalTransition(f"Cannot cancel a {task.status.value} task")

        return self._move(task, actor=actor, status=TaskStatus.CANCELLED, progress=task.progress, completed_at=None, now=now)

    def _move(
        self,
        task: Task,
        *,
        actor: Identity,
        status: TaskStatus,
        progress: int,
        completed_at: Optional[datetime],
        now: datetime,
    ) -> Task:
        moved = self._tasks.update_status(
            task_id=task.task_id,
            expected_status=task.status,
            status=status,
            progress=progress,
            completed_at=completed_at,
        )
        if not moved:
            # Someone else changed the task after we read it.
            raise IllegalTransition("Task was updated by someone else, please reload")

        self._activity.record(
            employee_id=actor.employee_id,
            action=f"Updated task status to {status.value}",
            entity_type=EntityType.TASK,
            entity_id=task.task_id,
            now=now,
        )
        return replace(task, status=status, progress=progress, completed_at=completed_at)

    def comment(self, task_id: int, *, author: Identity, text: str, now: Optional[datetime] = None) -> TaskComment:
        now = now or now_local()
        text = (require_text(text, "Comment") or "").strip()
        if not text:
            raise EmptyComment()

        task = self.get(task_id)
        if not author.is_admin and author.employee_id not in (task.assignee_id, task.assigner_id):
            raise AuthorizationError("Only people on this task can comment")

        comment_id = self._tasks.add_comment(
            task_id=task.task_id,
            author_id=author.employee_id,
            text=text,
            created_at=now,
        )
        self._activity.record(
            employee_id=author.employee_id,
            action="Commented on task",
            entity_type=EntityType.TASK,
            entity_id=task.task_id,
            now=now,
        )
        return TaskComment(
            comment_id=comment_id,
            task_id=task.task_id,
            author_id=author.employee_id,
            text=text,
            created_at=now,
        )

    def list_comments(self, task_id: int) -> Sequence[TaskComment]:
        self.get(task_id)
        return self._tasks.list_comments(int(task_id))
