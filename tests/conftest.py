from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from hr_portal.activity.model import ActivityEntry
from hr_portal.container import Container, wire
from hr_portal.core.constants import DEFAULT_LEAVE_ALLOTMENT
from hr_portal.core.enums import (
    AttendanceStatus,
    EmployeeStatus,
    LeaveCategory,
    LeaveStatus,
    Role,
    TaskPriority,
    TaskStatus,
)
from hr_portal.core.exceptions import DuplicateRecordError
from hr_portal.employees.identity import Identity
from hr_portal.employees.model import Employee
from hr_portal.attendance.model import AttendanceSession
from hr_portal.leaves.model import BalanceAnomaly, LeaveBalance, LeaveRequest
from hr_portal.tasks.model import Task, TaskComment

PASSWORD = "secret123"


class InMemoryEmployees:
    def __init__(self):
        self.by_id: dict[int, Employee] = {}
        self._id = 0

    def add(
        self,
        *,
        code: str,
        full_name: str,
        role: Role = Role.EMPLOYEE,
        status: EmployeeStatus = EmployeeStatus.ACTIVE,
        password: str = PASSWORD,
    ) -> Employee:
        employee_id = self.create_employee(
            employee_code=code,
            full_name=full_name,
            email=f"{code.lower()}@example.com",
            password_hash=generate_password_hash(password),
            role=role,
            department=None,
            position=None,
            joining_date=date(2024, 1, 1),
        )
        if status != EmployeeStatus.ACTIVE:
            self.set_status(employee_id, status=status)
        return self.by_id[employee_id]

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        return next((e for e in self.by_id.values() if e.employee_code == employee_code), None)

    def get_last_code(self) -> Optional[str]:
        if not self.by_id:
            return None
        return self.by_id[max(self.by_id)].employee_code

    def create_employee(self, *, employee_code, full_name, email, password_hash, role, department, position, joining_date) -> int:
        if any(e.email == email or e.employee_code == employee_code for e in self.by_id.values()):
            raise DuplicateRecordError(email)
        self._id += 1
        self.by_id[self._id] = Employee(
            employee_id=self._id,
            employee_code=employee_code,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            role=role,
            status=EmployeeStatus.ACTIVE,
            department=department,
            position=position,
            joining_date=joining_date,
        )
        return self._id

    def set_status(self, employee_id: int, *, status: EmployeeStatus) -> bool:
        employee = self.by_id.get(employee_id)
        if not employee:
            return False
        self.by_id[employee_id] = replace(employee, status=status)
        return True

    def list_all(self, *, status: Optional[EmployeeStatus] = None):
        return [e for e in self.by_id.values() if status is None or e.status == status]


class InMemoryAttendance:
    def __init__(self):
        self.by_employee_date: dict[tuple[int, date], AttendanceSession] = {}
        self._id = 0
        # Simulates a concurrent writer: reads miss, the unique key still holds.
        self.stale_reads = False

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceSession]:
        if self.stale_reads:
            return None
        return self.by_employee_date.get((employee_id, work_date))

    def create_session(self, *, employee_id: int, work_date: date, check_in: datetime, status: AttendanceStatus) -> int:
        if (employee_id, work_date) in self.by_employee_date:
            raise DuplicateRecordError(f"{employee_id}/{work_date}")
        self._id += 1
        self.by_employee_date[(employee_id, work_date)] = AttendanceSession(
            session_id=self._id,
            employee_id=employee_id,
            work_date=work_date,
            check_in=check_in,
            status=status,
        )
        return self._id

    def close_session(self, *, session_id: int, check_out: datetime, work_hours: float) -> bool:
        for key, session in self.by_employee_date.items():
            if session.session_id == session_id and session.check_out is None:
                self.by_employee_date[key] = replace(session, check_out=check_out, work_hours=work_hours)
                return True
        return False

    def list_sessions(self, *, start_date: date, end_date: date, employee_id: Optional[int] = None):
        items = [
            s for s in self.by_employee_date.values()
            if start_date <= s.work_date <= end_date and (employee_id is None or s.employee_id == employee_id)
        ]
        return sorted(items, key=lambda s: (s.work_date, s.employee_id), reverse=True)


class InMemoryLeaves:
    def __init__(self):
        self.requests: dict[int, LeaveRequest] = {}
        self.balances: dict[tuple[int, int], LeaveBalance] = {}
        self._id = 0
        self.fail_deductions = False

    def create_request(self, *, employee_id, category, from_date, to_date, total_days, reason, created_at) -> int:
        self._id += 1
        self.requests[self._id] = LeaveRequest(
            leave_id=self._id,
            employee_id=employee_id,
            category=category,
            from_date=from_date,
            to_date=to_date,
            total_days=total_days,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=created_at,
        )
        return self._id

    def get_request(self, leave_id: int) -> Optional[LeaveRequest]:
        return self.requests.get(leave_id)

    def list_requests(self, *, employee_id=None, status=None, limit=200):
        items = [
            r for r in self.requests.values()
            if (employee_id is None or r.employee_id == employee_id) and (status is None or r.status == status)
        ]
        return sorted(items, key=lambda r: r.leave_id, reverse=True)[:limit]

    def decide_request(self, *, leave_id, status, approver_id, approved_at, rejection_reason=None) -> bool:
        leave = self.requests.get(leave_id)
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self.requests[leave_id] = replace(
            leave,
            status=status,
            approver_id=approver_id,
            approved_at=approved_at,
            rejection_reason=rejection_reason,
        )
        return True

    def get_balance(self, *, employee_id: int, year: int) -> Optional[LeaveBalance]:
        return self.balances.get((employee_id, year))

    def create_balance(self, *, employee_id: int, year: int) -> None:
        if (employee_id, year) in self.balances:
            raise DuplicateRecordError(f"{employee_id}/{year}")
        self.balances[(employee_id, year)] = LeaveBalance(
            employee_id=employee_id,
            year=year,
            sick=DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.SICK],
            casual=DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.CASUAL],
            earned=DEFAULT_LEAVE_ALLOTMENT[LeaveCategory.EARNED],
        )

    def set_balance(self, employee_id: int, year: int, **days) -> None:
        self.balances[(employee_id, year)] = replace(self.balances[(employee_id, year)], **days)

    def deduct_balance(self, *, employee_id: int, year: int, category: LeaveCategory, days: int) -> bool:
        if self.fail_deductions:
            raise RuntimeError("connection lost")
        balance = self.balances.get((employee_id, year))
        if not balance:
            return False
        remaining = max(getattr(balance, category.value) - days, 0)
        self.balances[(employee_id, year)] = replace(balance, **{category.value: remaining})
        return True


class InMemoryAnomalies:
    def __init__(self):
        self.rows: dict[int, BalanceAnomaly] = {}
        self._id = 0

    def record(self, *, leave_id, employee_id, year, category, days, reason, created_at) -> int:
        self._id += 1
        self.rows[self._id] = BalanceAnomaly(
            anomaly_id=self._id,
            leave_id=leave_id,
            employee_id=employee_id,
            year=year,
            category=category,
            days=days,
            reason=reason,
            created_at=created_at,
        )
        return self._id

    def list_open(self):
        return [a for a in self.rows.values() if a.resolved_at is None]

    def claim(self, anomaly_id: int, *, resolved_at: datetime) -> bool:
        anomaly = self.rows.get(anomaly_id)
        if not anomaly or anomaly.resolved_at is not None:
            return False
        self.rows[anomaly_id] = replace(anomaly, resolved_at=resolved_at)
        return True

    def release(self, anomaly_id: int) -> None:
        self.rows[anomaly_id] = replace(self.rows[anomaly_id], resolved_at=None)


class InMemoryTasks:
    def __init__(self):
        self.tasks: dict[int, Task] = {}
        self.comments: list[TaskComment] = []
        self._id = 0

    def get_last_code(self) -> Optional[str]:
        if not self.tasks:
            return None
        return self.tasks[max(self.tasks)].task_code

    def create_task(self, *, task_code, title, description, assignee_id, assigner_id, priority, due_date, created_at) -> int:
        self._id += 1
        self.tasks[self._id] = Task(
            task_id=self._id,
            task_code=task_code,
            title=title,
            description=description,
            assignee_id=assignee_id,
            assigner_id=assigner_id,
            priority=priority,
            status=TaskStatus.ASSIGNED,
            progress=0,
            created_at=created_at,
            due_date=due_date,
        )
        return self._id

    def get_by_id(self, task_id: int) -> Optional[Task]:
        return self.tasks.get(task_id)

    def list_tasks(self, *, assignee_id=None, status=None, limit=200):
        items = [
            t for t in self.tasks.values()
            if (assignee_id is None or t.assignee_id == assignee_id) and (status is None or t.status == status)
        ]
        return sorted(items, key=lambda t: t.task_id, reverse=True)[:limit]

    def update_status(self, *, task_id, expected_status, status, progress, completed_at=None) -> bool:
        task = self.tasks.get(task_id)
        if not task or task.status != expected_status:
            return False
        self.tasks[task_id] = replace(task, status=status, progress=progress, completed_at=completed_at)
        return True

    def add_comment(self, *, task_id, author_id, text, created_at) -> int:
        comment = TaskComment(
            comment_id=len(self.comments) + 1,
            task_id=task_id,
            author_id=author_id,
            text=text,
            created_at=created_at,
        )
        self.comments.append(comment)
        return comment.comment_id

    def list_comments(self, task_id: int):
        return [c for c in self.comments if c.task_id == task_id]


class InMemoryActivity:
    def __init__(self):
        self.entries: list[ActivityEntry] = []
        self.fail = False

    def append(self, entry: ActivityEntry) -> int:
        if self.fail:
            raise RuntimeError("audit store unavailable")
        self.entries.append(entry)
        return len(self.entries)

    def actions(self) -> list[str]:
        return [e.action for e in self.entries]


class DictSessionStore:
    def __init__(self, employee_id: Optional[int] = None):
        self.employee_id = employee_id

    def get(self) -> Optional[int]:
        return self.employee_id

    def set(self, employee_id: int) -> None:
        self.employee_id = employee_id

    def clear(self) -> None:
        self.employee_id = None


@dataclass
class Fakes:
    employees: InMemoryEmployees
    attendance: InMemoryAttendance
    leaves: InMemoryLeaves
    anomalies: InMemoryAnomalies
    tasks: InMemoryTasks
    activity: InMemoryActivity


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 5, 9, 0)


@pytest.fixture
def fakes() -> Fakes:
    return Fakes(
        employees=InMemoryEmployees(),
        attendance=InMemoryAttendance(),
        leaves=InMemoryLeaves(),
        anomalies=InMemoryAnomalies(),
        tasks=InMemoryTasks(),
        activity=InMemoryActivity(),
    )


@pytest.fixture
def container(fakes: Fakes) -> Container:
    return wire(
        employees_repo=fakes.employees,
        attendance_repo=fakes.attendance,
        leaves_repo=fakes.leaves,
        anomalies_repo=fakes.anomalies,
        tasks_repo=fakes.tasks,
        activity_repo=fakes.activity,
    )


@pytest.fixture
def admin(fakes: Fakes) -> Identity:
    return Identity.of(fakes.employees.add(code="EMP001", full_name="System Admin", role=Role.ADMIN))


@pytest.fixture
def employee(fakes: Fakes, admin: Identity, fixed_now: datetime) -> Identity:
    emp = fakes.employees.add(code="EMP002", full_name="Lan Nguyen")
    fakes.leaves.create_balance(employee_id=emp.employee_id, year=fixed_now.year)
    return Identity.of(emp)


@pytest.fixture
def session_store() -> DictSessionStore:
    return DictSessionStore()


@pytest.fixture
def make_task(container: Container, admin: Identity, employee: Identity, fixed_now: datetime):
    def _make(**overrides) -> Task:
        kwargs = dict(
            assigner=admin,
            title="Prepare onboarding pack",
            assignee_id=employee.employee_id,
            priority=TaskPriority.HIGH,
            now=fixed_now,
        )
        kwargs.update(overrides)
        return container.task_service.create(**kwargs)

    return _make
