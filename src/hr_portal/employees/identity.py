from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from flask import session as flask_session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import Employee

SESSION_KEY = "employee_id"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, passed explicitly into every ledger call."""

    employee_id: int
    employee_code: str
    full_name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def of(cls, employee: Employee) -> "Identity":
        return cls(
            employee_id=employee.employee_id,
            employee_code=employee.employee_code,
            full_name=employee.full_name,
            role=employee.role,
        )


def require_admin(identity: Identity, message: str = "Administrator access required") -> Identity:
    if not identity.is_admin:
        raise AuthorizationError(message)
    return identity


class SessionStore(Protocol):
    """Where the session reference (an employee id) is persisted between calls."""

    def get(self) -> Optional[int]:
        raise NotImplementedError

    def set(self, employee_id: int) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class FlaskSessionStore(SessionStore):
    """Keeps the reference in Flask's signed session cookie."""

    def get(self) -> Optional[int]:
        value = flask_session.get(SESSION_KEY)
        return int(value) if value is not None else None

    def set(self, employee_id: int) -> None:
        flask_session[SESSION_KEY] = int(employee_id)

    def clear(self) -> None:
        flask_session.pop(SESSION_KEY, None)
