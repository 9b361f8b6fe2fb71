from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus, Role
from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_last_code(self) -> Optional[str]:
        """Most recently issued employee code, None when there are no employees."""

        raise NotImplementedError

    def create_employee(
        self,
        *,
        employee_code: str,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        position: Optional[str],
        joining_date: Optional[date],
    ) -> int:
        raise NotImplementedError

    def set_status(self, employee_id: int, *, status: EmployeeStatus) -> bool:
        raise NotImplementedError

    def list_all(self, *, status: Optional[EmployeeStatus] = None) -> Sequence[Employee]:
        raise NotImplementedError
