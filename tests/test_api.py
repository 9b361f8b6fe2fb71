from __future__ import annotations

from datetime import date

import pytest

from hr_portal.main import create_app

from conftest import PASSWORD


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def this_year_balance(fakes, employee):
    year = date.today().year
    if fakes.leaves.get_balance(employee_id=employee.employee_id, year=year) is None:
        fakes.leaves.create_balance(employee_id=employee.employee_id, year=year)
    return year


def login(client, code, password=PASSWORD):
    return client.post("/api/auth/login", json={"employee_code": code, "password": password})


def test_login_and_me(client, employee):
    resp = login(client, "EMP002")
    assert resp.status_code == 200
    assert resp.get_json()["identity"]["employee_code"] == "EMP002"
    assert resp.get_json()["is_admin"] is False

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.get_json()["identity"]["role"] == "employee"


def test_login_failure_maps_to_401(client, employee):
    resp = login(client, "EMP002", "nope-nope")
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "InvalidCredentials"


def test_routes_require_sign_in(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.post("/api/attendance/check-in").status_code == 401


def test_logout_clears_session(client, employee):
    login(client, "EMP002")
    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_attendance_flow(client, employee):
    login(client, "EMP002")

    assert client.post("/api/attendance/check-in").status_code == 201
    again = client.post("/api/attendance/check-in")
    assert again.status_code == 409
    assert again.get_json()["code"] == "AlreadyCheckedIn"

    assert client.post("/api/attendance/check-out").status_code == 200
    assert client.post("/api/attendance/check-out").status_code == 409

    today = client.get("/api/attendance/today").get_json()["session"]
    assert today["check_out"] is not None

    listing = client.get("/api/attendance").get_json()
    assert len(listing["sessions"]) == 1
    assert listing["summary"]["present_days"] == 1


def test_attendance_range_validation(client, employee):
    login(client, "EMP002")
    assert client.get("/api/attendance?start=2024-03-10&end=2024-03-01").status_code == 400
    assert client.get("/api/attendance?month=13").status_code == 400
    assert client.get("/api/attendance?start=yesterday&end=2024-03-01").status_code == 400


def test_admin_only_routes(client, employee):
    login(client, "EMP002")
    resp = client.post("/api/employees", json={"full_name": "X"})
    assert resp.status_code == 403
    assert client.get("/api/leaves/anomalies").status_code == 403


def test_onboard_over_http(client, admin):
    login(client, "EMP001")
    resp = client.post(
        "/api/employees",
        json={"full_name": "Hoa Pham", "email": "hoa@example.com", "password": "welcome1"},
    )

    assert resp.status_code == 201
    body = resp.get_json()["employee"]
    assert body["employee_code"] == "EMP002"
    assert "password_hash" not in body

    listing = client.get("/api/employees").get_json()["employees"]
    assert [e["employee_code"] for e in listing] == ["EMP001", "EMP002"]


def test_leave_flow(client, employee, this_year_balance):
    login(client, "EMP002")
    submitted = client.post(
        "/api/leaves",
        json={"category": "casual", "from_date": "2024-03-05", "to_date": "2024-03-07", "reason": "Wedding"},
    )
    assert submitted.status_code == 201
    leave_id = submitted.get_json()["leave"]["leave_id"]
    assert submitted.get_json()["leave"]["total_days"] == 3

    assert client.post(f"/api/leaves/{leave_id}/decision", json={"outcome": "approved"}).status_code == 403

    client.post("/api/auth/logout")
    login(client, "EMP001")
    decided = client.post(f"/api/leaves/{leave_id}/decision", json={"outcome": "approved"})
    assert decided.status_code == 200
    assert decided.get_json()["leave"]["status"] == "approved"

    again = client.post(f"/api/leaves/{leave_id}/decision", json={"outcome": "rejected", "rejection_reason": "x"})
    assert again.status_code == 409

    client.post("/api/auth/logout")
    login(client, "EMP002")
    balance = client.get(f"/api/leaves/balance?year={this_year_balance}").get_json()["balance"]
    assert balance["casual"] == 9
    assert len(client.get("/api/leaves").get_json()["leaves"]) == 1


def test_leave_validation_over_http(client, employee):
    login(client, "EMP002")
    resp = client.post(
        "/api/leaves",
        json={"category": "casual", "from_date": "2024-03-07", "to_date": "2024-03-05", "reason": "Trip"},
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "InvalidDateRange"
    assert client.post("/api/leaves", json={"category": "casual"}).status_code == 400


def test_missing_balance_asks_to_contact_hr(client, employee):
    login(client, "EMP002")
    body = client.get("/api/leaves/balance?year=1999").get_json()
    assert body["balance"] is None
    assert "contact HR" in body["message"]


def test_anomaly_reconciliation_over_http(client, admin, employee, fakes, this_year_balance):
    login(client, "EMP002")
    leave_id = client.post(
        "/api/leaves",
        json={"category": "sick", "from_date": "2024-05-01", "to_date": "2024-05-02", "reason": "Flu"},
    ).get_json()["leave"]["leave_id"]
    client.post("/api/auth/logout")

    login(client, "EMP001")
    fakes.leaves.fail_deductions = True
    assert client.post(f"/api/leaves/{leave_id}/decision", json={"outcome": "approved"}).status_code == 200
    assert len(client.get("/api/leaves/anomalies").get_json()["anomalies"]) == 1

    fakes.leaves.fail_deductions = False
    report = client.post("/api/leaves/anomalies/reconcile").get_json()
    assert len(report["resolved"]) == 1
    assert fakes.leaves.get_balance(employee_id=employee.employee_id, year=this_year_balance).sick == 8


def test_task_flow(client, admin, employee):
    login(client, "EMP001")
    created = client.post(
        "/api/tasks",
        json={"title": "Quarterly report", "assignee_id": employee.employee_id, "priority": "high"},
    )
    assert created.status_code == 201
    task_id = created.get_json()["task"]["task_id"]
    client.post("/api/auth/logout")

    login(client, "EMP002")
    skipped = client.post(f"/api/tasks/{task_id}/advance", json={"status": "completed"})
    assert skipped.status_code == 409
    assert skipped.get_json()["code"] == "IllegalTransition"

    started = client.post(f"/api/tasks/{task_id}/advance", json={"status": "in_progress"})
    assert started.get_json()["task"]["progress"] == 25
    done = client.post(f"/api/tasks/{task_id}/advance", json={"status": "completed"})
    assert done.get_json()["task"]["progress"] == 100

    assert client.post(f"/api/tasks/{task_id}/comments", json={"text": "Sent"}).status_code == 201
    assert client.post(f"/api/tasks/{task_id}/comments", json={"text": " "}).status_code == 400
    comments = client.get(f"/api/tasks/{task_id}/comments").get_json()["comments"]
    assert [c["text"] for c in comments] == ["Sent"]

    assert client.post(f"/api/tasks/{task_id}/cancel").status_code == 403
    assert len(client.get("/api/tasks").get_json()["tasks"]) == 1


def test_unknown_task_is_404(client, employee):
    login(client, "EMP002")
    assert client.get("/api/tasks/999").status_code == 404


def test_unexpected_error_is_500(client, container, employee, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database is down")

    monkeypatch.setattr(container.attendance_service, "check_in", boom)
    login(client, "EMP002")

    resp = client.post("/api/attendance/check-in")
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "System error, please try again"


def test_unknown_route_keeps_404(client):
    assert client.get("/api/nope").status_code == 404


def test_non_text_fields_are_rejected(client, admin, employee):
    login(client, "EMP002")
    resp = client.post(
        "/api/leaves",
        json={"category": "casual", "from_date": "2024-03-05", "to_date": "2024-03-05", "reason": 123},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Reason must be text"
    client.post("/api/auth/logout")

    login(client, "EMP001")
    task_id = client.post(
        "/api/tasks", json={"title": "Audit", "assignee_id": employee.employee_id}
    ).get_json()["task"]["task_id"]

    resp = client.post(f"/api/tasks/{task_id}/comments", json={"text": 7})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "ValidationError"
    assert client.post("/api/tasks", json={"title": ["x"], "assignee_id": employee.employee_id}).status_code == 400
