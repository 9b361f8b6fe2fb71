from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import ActivityEntry
from .repository import ActivityRepository


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, entry: ActivityEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs(employee_id, action, entity_type, entity_id, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (entry.employee_id, entry.action, entry.entity_type.value, entry.entity_id, entry.created_at),
            )
            return int(cur.lastrowid)
