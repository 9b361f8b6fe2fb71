from __future__ import annotations

from dataclasses import replace

import pytest

from hr_portal.core.enums import EmployeeStatus, Role
from hr_portal.core.exceptions import AccountInactive, AuthorizationError, InvalidCredentials
from hr_portal.employees.identity import require_admin

from conftest import PASSWORD


def test_authenticate_sets_session(container, employee, fakes, session_store):
    identity = container.identity_service.authenticate("EMP002", PASSWORD, session=session_store)

    assert identity.employee_code == "EMP002"
    assert identity.role == Role.EMPLOYEE
    assert not identity.is_admin
    assert session_store.employee_id == employee.employee_id
    assert fakes.activity.actions() == ["User logged in"]


def test_wrong_password(container, employee, session_store):
    with pytest.raises(InvalidCredentials):
        container.identity_service.authenticate("EMP002", "wrong-password", session=session_store)
    assert session_store.employee_id is None


def test_unknown_code(container, session_store):
    with pytest.raises(InvalidCredentials):
        container.identity_service.authenticate("EMP999", PASSWORD, session=session_store)


def test_corrupted_hash_is_invalid_credentials(container, fakes, session_store):
    emp = fakes.employees.add(code="EMP010", full_name="Legacy User")
    fakes.employees.by_id[emp.employee_id] = replace(emp, password_hash="plaintext")

    with pytest.raises(InvalidCredentials):
        container.identity_service.authenticate("EMP010", PASSWORD, session=session_store)


@pytest.mark.parametrize("status", [EmployeeStatus.INACTIVE, EmployeeStatus.TERMINATED])
def test_non_active_account_cannot_sign_in(container, fakes, session_store, status):
    fakes.employees.add(code="EMP020", full_name="Former Staff", status=status)

    with pytest.raises(AccountInactive):
        container.identity_service.authenticate("EMP020", PASSWORD, session=session_store)
    assert session_store.employee_id is None


def test_resolve_current_identity(container, employee, session_store):
    assert container.identity_service.resolve_current_identity(session_store) is None

    session_store.set(employee.employee_id)
    assert container.identity_service.resolve_current_identity(session_store) == employee


def test_resolve_drops_deactivated_session(container, employee, fakes, session_store):
    session_store.set(employee.employee_id)
    fakes.employees.set_status(employee.employee_id, status=EmployeeStatus.TERMINATED)

    assert container.identity_service.resolve_current_identity(session_store) is None
    assert session_store.employee_id is None


def test_end_session(container, employee, fakes, session_store):
    container.identity_service.authenticate("EMP002", PASSWORD, session=session_store)
    container.identity_service.end_session(session_store)

    assert session_store.employee_id is None
    assert fakes.activity.actions() == ["User logged in", "User logged out"]


def test_audit_failure_does_not_block_login(container, employee, fakes, session_store):
    fakes.activity.fail = True

    identity = container.identity_service.authenticate("EMP002", PASSWORD, session=session_store)

    assert identity.employee_id == employee.employee_id
    assert fakes.activity.entries == []


def test_require_admin(admin, employee):
    assert require_admin(admin) is admin
    with pytest.raises(AuthorizationError):
        require_admin(employee)


@pytest.mark.parametrize("code", ["emp002", " EMP002", "EMP002 "])
def test_employee_code_must_match_exactly(container, employee, session_store, code):
    with pytest.raises(InvalidCredentials):
        container.identity_service.authenticate(code, PASSWORD, session=session_store)
    assert session_store.employee_id is None
