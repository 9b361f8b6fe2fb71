from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..activity.service import ActivityLog
from ..app_logger import get_logger
from ..common.codes import next_sequential_code
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_enum, require_min_length, require_non_empty
from ..core.constants import EMPLOYEE_CODE_PREFIX, MIN_PASSWORD_LENGTH
from ..core.enums import EmployeeStatus, EntityType, Role
from ..core.exceptions import (
    AccountInactive,
    DuplicateRecordError,
    EmployeeNotFound,
    InvalidCredentials,
    ValidationError,
)
from ..leaves.repository import LeaveRepository
from .identity import Identity, SessionStore, require_admin
from .model import Employee
from .repository import EmployeeRepository

logger = get_logger(__name__)

# Statuses an employee may move to from each status.
_STATUS_TRANSITIONS = {
    EmployeeStatus.ACTIVE: {EmployeeStatus.INACTIVE, EmployeeStatus.TERMINATED},
    EmployeeStatus.INACTIVE: {EmployeeStatus.TERMINATED},
    EmployeeStatus.TERMINATED: set(),
}


class IdentityService:
    """Use case: authenticate, resolve and end the caller's session."""

    def __init__(self, employees: EmployeeRepository, activity: ActivityLog):
        self._employees = employees
        self._activity = activity

    def authenticate(self, employee_code: str, password: str, *, session: SessionStore) -> Identity:
        code = employee_code or ""
        employee = self._employees.get_by_code(code) if code else None

        try:
            ok = bool(employee) and check_password_hash(employee.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hashes in the store
            ok = False

        if not ok:
            logger.info("login rejected for code=%r: invalid credentials", code)
            raise InvalidCredentials()

        if not employee.is_active:
            logger.info("login rejected for %s: status=%s", employee.employee_code, employee.status.value)
            raise AccountInactive()

        session.set(employee.employee_id)
        self._activity.record(
            employee_id=employee.employee_id,
            action="User logged in",
            entity_type=EntityType.AUTH,
        )
        return Identity.of(employee)

    def resolve_current_identity(self, session: SessionStore) -> Optional[Identity]:
        employee_id = session.get()
        if employee_id is None:
            return None

        employee = self._employees.get_by_id(employee_id)
        if not employee or not employee.is_active:
            session.clear()
            return None
        return Identity.of(employee)

    def end_session(self, session: SessionStore) -> None:
        identity = self.resolve_current_identity(session)
        session.clear()
        if identity:
            self._activity.record(
                employee_id=identity.employee_id,
                action="User logged out",
                entity_type=EntityType.AUTH,
            )


class EmployeeService:
    """Use case: onboard and manage employees (admin)."""

    def __init__(
        self,
        employees: EmployeeRepository,
        leaves: LeaveRepository,
        activity: ActivityLog,
    ):
        self._employees = employees
        self._leaves = leaves
        self._activity = activity

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise EmployeeNotFound()
        return employee

    def list_employees(self, *, status: Optional[EmployeeStatus] = None) -> Sequence[Employee]:
        return self._employees.list_all(status=status)

    def onboard(
        self,
        *,
        actor: Identity,
        full_name: str,
        email: str,
        password: str,
        role: Role | str = Role.EMPLOYEE,
        department: Optional[str] = None,
        position: Optional[str] = None,
        joining_date=None,
        now: Optional[datetime] = None,
    ) -> Employee:
        require_admin(actor)
        now = now or now_local()

        full_name = require_non_empty(full_name, "Full name")
        email = require_non_empty(email, "Email").lower()
        if "@" not in email:
            raise ValidationError("Invalid email")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = require_enum(Role, role, "role")

        code = next_sequential_code(EMPLOYEE_CODE_PREFIX, self._employees.get_last_code())
        try:
            employee_id = self._employees.create_employee(
                employee_code=code,
                full_name=full_name,
                email=email,
                password_hash=generate_password_hash(password),
                role=role,
                department=optional_text(department, "Department"),
                position=optional_text(position, "Position"),
                joining_date=joining_date or now.date(),
            )
        except DuplicateRecordError:
            raise ValidationError("An employee with this email or code already exists")

        self._leaves.create_balance(employee_id=employee_id, year=now.year)
        self._activity.record(
            employee_id=actor.employee_id,
            action=f"Onboarded employee {code}",
            entity_type=EntityType.EMPLOYEE,
            entity_id=employee_id,
            now=now,
        )
        logger.info("employee %s onboarded by %s", code, actor.employee_code)
        return self.get(employee_id)

    def initialize_balance(self, *, actor: Identity, employee_id: int, year: int) -> None:
        """Create the default-allotment balance for a year that has none yet."""

        require_admin(actor)
        self.get(employee_id)
        try:
            self._leaves.create_balance(employee_id=int(employee_id), year=int(year))
        except DuplicateRecordError:
            raise ValidationError(f"Leave balance for {year} is already initialized")

        self._activity.record(
            employee_id=actor.employee_id,
            action=f"Initialized {year} leave balance",
            entity_type=EntityType.EMPLOYEE,
            entity_id=int(employee_id),
        )

    def change_status(self, *, actor: Identity, employee_id: int, status: EmployeeStatus | str) -> Employee:
        require_admin(actor)
        status = require_enum(EmployeeStatus, status, "status")
        employee = self.get(employee_id)

        if employee.employee_id == actor.employee_id:
            raise ValidationError("You cannot change your own status")
        if status not in _STATUS_TRANSITIONS[employee.status]:
            raise ValidationError(f"Cannot change status from {employee.status.value} to {status.value}")

        if not self._employees.set_status(employee.employee_id, status=status):
            raise ValidationError("Updating employee status failed")

        self._activity.record(
            employee_id=actor.employee_id,
            action=f"Changed employee status to {status.value}",
            entity_type=EntityType.EMPLOYEE,
            entity_id=employee.employee_id,
        )
        return self.get(employee.employee_id)
