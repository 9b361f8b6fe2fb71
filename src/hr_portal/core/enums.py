from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Typed role tag produced once at the identity boundary."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"


class LeaveCategory(str, Enum):
    SICK = "sick"
    CASUAL = "casual"
    EARNED = "earned"
    UNPAID = "unpaid"

    @property
    def has_balance(self) -> bool:
        return self is not LeaveCategory.UNPAID


class LeaveStatus(str, Enum):
    """Leave approval flow: PENDING moves once to APPROVED or REJECTED."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskStatus(str, Enum):
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EntityType(str, Enum):
    """Entity kinds written to the activity log."""

    AUTH = "auth"
    SYSTEM = "system"
    EMPLOYEE = "employee"
    ATTENDANCE = "attendance"
    LEAVE = "leave"
    TASK = "task"
