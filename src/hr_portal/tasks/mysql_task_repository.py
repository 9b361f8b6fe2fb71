from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where_clause
from .model import Task, TaskComment
from .repository import TaskRepository

_COLUMNS = """
    task_id, task_code, title, description, assignee_id, assigner_id, priority, status,
    progress, created_at, due_date, completed_at
"""


def _row_to_task(r: dict) -> Task:
    return Task(
        task_id=int(r["task_id"]),
        task_code=r["task_code"],
        title=r["title"],
        description=r.get("description"),
        assignee_id=int(r["assignee_id"]),
        assigner_id=int(r["assigner_id"]),
        priority=TaskPriority(r["priority"]),
        status=TaskStatus(r["status"]),
        progress=int(r["progress"]),
        created_at=r["created_at"],
        due_date=r.get("due_date"),
        completed_at=r.get("completed_at"),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_last_code(self) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT task_code FROM tasks ORDER BY task_id DESC LIMIT 1")
            r = fetchone(cur)
            return r["task_code"] if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(task_code, title, description, assignee_id, assigner_id, priority,
                                  status, progress, due_date, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    task_code,
                    title,
                    description,
                    int(assignee_id),
                    int(assigner_id),
                    priority.value,
                    TaskStatus.ASSIGNED.value,
                    0,
                    due_date,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE task_id=%s", (int(task_id),))
            r = fetchone(cur)
            return _row_to_task(r) if r else None

    def list_tasks(
        self,
        *,
        assignee_id: Optional[int] = None,
        status: Optional[TaskStatus] = None,
        limit: int = 200,
    ) -> Sequence[Task]:
        where, params = where_clause({"assignee_id": assignee_id, "status": status})
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM tasks
                WHERE {where}
                ORDER BY created_at DESC, task_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_task(r) for r in fetchall(cur)]

    def update_status(
        self,
        *,
        task_id: int,
        expected_status: TaskStatus,
        status: TaskStatus,
        progress: int,
        completed_at: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET status=%s, progress=%s, completed_at=%s
                WHERE task_id=%s AND status=%s
                """,
                (status.value, int(progress), completed_at, int(task_id), expected_status.value),
            )
            return cur.rowcount > 0

    # -------- Comments --------
    def add_comment(self, *, task_id: int, author_id: int, text: str, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO task_comments(task_id, author_id, text, created_at)
                VALUES(%s,%s,%s,%s)
                """,
                (int(task_id), int(author_id), text, created_at),
            )
            return int(cur.lastrowid)

    def list_comments(self, task_id: int) -> Sequence[TaskComment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT comment_id, task_id, author_id, text, created_at
                FROM task_comments
                WHERE task_id=%s
                ORDER BY created_at ASC, comment_id ASC
                """,
                (int(task_id),),
            )
            return [
                TaskComment(
                    comment_id=int(r["comment_id"]),
                    task_id=int(r["task_id"]),
                    author_id=int(r["author_id"]),
                    text=r["text"],
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
