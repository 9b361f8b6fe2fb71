from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import EmployeeStatus, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee (identity + HR profile).

    Note: Plain data object, no DB access code here.
    """

    employee_id: int
    employee_code: str
    full_name: str
    email: str
    password_hash: str
    role: Role
    status: EmployeeStatus
    department: Optional[str] = None
    position: Optional[str] = None
    joining_date: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
