from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .activity.mysql_activity_repository import MySQLActivityRepository
from .activity.repository import ActivityRepository
from .activity.service import ActivityLog
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeService, IdentityService
from .leaves.mysql_leave_repository import MySQLBalanceAnomalyRepository, MySQLLeaveRepository
from .leaves.reconciliation import LeaveReconciliationService
from .leaves.repository import BalanceAnomalyRepository, LeaveRepository
from .leaves.service import LeaveService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository
    anomalies_repo: BalanceAnomalyRepository
    tasks_repo: TaskRepository
    activity_repo: ActivityRepository

    activity_log: ActivityLog
    identity_service: IdentityService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveService
    reconciliation_service: LeaveReconciliationService
    task_service: TaskService

    conn: Optional[DatabaseConnection] = None


def wire(
    *,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRepository,
    anomalies_repo: BalanceAnomalyRepository,
    tasks_repo: TaskRepository,
    activity_repo: ActivityRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service on top of the given repositories."""

    activity_log = ActivityLog(activity_repo)

    return Container(
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        anomalies_repo=anomalies_repo,
        tasks_repo=tasks_repo,
        activity_repo=activity_repo,
        activity_log=activity_log,
        identity_service=IdentityService(employees_repo, activity_log),
        employee_service=EmployeeService(employees_repo, leaves_repo, activity_log),
        attendance_service=AttendanceService(attendance_repo, activity_log),
        leave_service=LeaveService(leaves_repo, anomalies_repo, activity_log),
        reconciliation_service=LeaveReconciliationService(leaves_repo, anomalies_repo, activity_log),
        task_service=TaskService(tasks_repo, employees_repo, activity_log),
        conn=conn,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        anomalies_repo=MySQLBalanceAnomalyRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        activity_repo=MySQLActivityRepository(conn),
        conn=conn,
    )
