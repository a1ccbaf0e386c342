from __future__ import annotations

from datetime import datetime

import pytest

from src.shopfloor.shopfloor.container import assemble
from src.shopfloor.shopfloor.core.enums import MachineStatus, QRPointType
from src.shopfloor.shopfloor.main import create_app

from tests.fakes import FakeQRPointRepo, FakeShiftRepo, FakeTaskRepo, FakeWorkLogRepo, FixedClock

ENTRANCE = "a" * 64


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 10, 8, 0))


@pytest.fixture
def app(monkeypatch, clock):
    monkeypatch.setenv("APP_ENV", "testing")

    qr_repo = FakeQRPointRepo()
    qr_repo.add(ENTRANCE, QRPointType.ENTRANCE, "Gate")
    tasks_repo = FakeTaskRepo()
    tasks_repo.add(1, norm=500, total=1000)
    tasks_repo.add(2, machine_id=2, machine_name="Press", machine_status=MachineStatus.REPAIR)

    container = assemble(
        qr_repo=qr_repo,
        shifts_repo=FakeShiftRepo(),
        tasks_repo=tasks_repo,
        worklogs_repo=FakeWorkLogRepo(),
        clock=clock,
    )
    return create_app(container=container)


def _login(client, user_id=1, role="EMPLOYEE"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def test_requires_login(app):
    client = app.test_client()

    resp = client.post("/api/shifts/scan", json={"token": ENTRANCE})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_scan_clock_in_then_current_shift(app):
    client = app.test_client()
    _login(client)

    resp = client.post("/api/shifts/scan", json={"token": ENTRANCE})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["action"] == "CLOCK_IN"

    current = client.get("/api/shifts/current").get_json()["data"]
    assert current["status"] == "OPEN"
    assert current["time_in"] == "2025-03-10T08:00:00"


def test_domain_errors_map_to_status_codes(app):
    client = app.test_client()
    _login(client)

    assert client.post("/api/shifts/scan", json={"token": "unknown"}).status_code == 404
    assert client.post("/api/shifts/scan", json={}).status_code == 400
    assert client.post("/api/shifts/no-lunch").status_code == 422
    assert client.post("/api/worklogs/start", json={"task_id": 2}).status_code == 422

    assert client.post("/api/worklogs/start", json={"task_id": 1}).status_code == 200
    assert client.post("/api/worklogs/start", json={"task_id": 1}).status_code == 409


def test_work_session_round_trip(app, clock):
    client = app.test_client()
    _login(client)

    log = client.post("/api/worklogs/start", json={"task_id": 1}).get_json()["data"]
    clock.set(datetime(2025, 3, 10, 10, 0))
    resp = client.post(
        "/api/worklogs/end",
        json={"work_log_id": log["id"], "quantity_produced": 1000, "defect_quantity": 0},
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "CLOSED"

    stats = client.get("/api/analytics/efficiency/1?start=2025-03-10&end=2025-03-10").get_json()["data"]
    assert stats["efficiency"] == 100

    contribution = client.get("/api/analytics/tasks/1/contribution").get_json()["data"]
    assert contribution["completed_quantity"] == 1000


def test_end_with_negative_quantity_is_rejected(app):
    client = app.test_client()
    _login(client)
    log = client.post("/api/worklogs/start", json={"task_id": 1}).get_json()["data"]

    resp = client.post("/api/worklogs/end", json={"work_log_id": log["id"], "quantity_produced": -5, "defect_quantity": 0})

    assert resp.status_code == 400


def test_qr_points_are_admin_only(app):
    client = app.test_client()
    _login(client, role="EMPLOYEE")
    assert client.post("/api/qr/points", json={"type": "EXIT", "name": "Back door"}).status_code == 403

    _login(client, user_id=9, role="ADMIN")
    created = client.post("/api/qr/points", json={"type": "EXIT", "name": "Back door"})
    assert created.status_code == 201
    assert len(created.get_json()["data"]["token"]) == 64
    assert len(client.get("/api/qr/points").get_json()["data"]) == 2


def test_empty_production_statistics(app):
    client = app.test_client()
    _login(client)
    assert client.get("/api/analytics/production").status_code == 403

    _login(client, user_id=9, role="ADMIN")

    data = client.get("/api/analytics/production").get_json()["data"]

    assert data["overall"]["efficiency"] == 0
    assert data["daily"] == []
    assert data["period"]["start_date"] == "2025-03-01"


def test_employee_ranking_is_admin_only(app, clock):
    client = app.test_client()
    for user_id, quantity in ((1, 250), (2, 500)):
        _login(client, user_id=user_id)
        log = client.post("/api/worklogs/start", json={"task_id": 1}).get_json()["data"]
        clock.set(datetime(2025, 3, 10, 9, 0))
        client.post("/api/worklogs/end", json={"work_log_id": log["id"], "quantity_produced": quantity, "defect_quantity": 0})
        clock.set(datetime(2025, 3, 10, 8, 0))

    assert client.get("/api/analytics/employees").status_code == 403

    _login(client, user_id=9, role="ADMIN")
    ranking = client.get("/api/analytics/employees?start=2025-03-10&end=2025-03-10").get_json()["data"]
    assert [(r["user_id"], r["efficiency"]) for r in ranking] == [(2, 100), (1, 50)]

    only_first = client.get("/api/analytics/employees?start=2025-03-10&end=2025-03-10&user_ids=1").get_json()["data"]
    assert [r["user_id"] for r in only_first] == [1]


def test_get_shift_by_id(app):
    client = app.test_client()
    _login(client, user_id=1)
    shift = client.post("/api/shifts/scan", json={"token": ENTRANCE}).get_json()["data"]["shift"]

    resp = client.get(f"/api/shifts/{shift['id']}")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user_id"] == 1

    _login(client, user_id=2)
    assert client.get(f"/api/shifts/{shift['id']}").status_code == 403
    assert client.get("/api/shifts/999").status_code == 404

    _login(client, user_id=9, role="ADMIN")
    assert client.get(f"/api/shifts/{shift['id']}").status_code == 200


def test_fractional_quantity_is_rejected(app):
    client = app.test_client()
    _login(client)
    log = client.post("/api/worklogs/start", json={"task_id": 1}).get_json()["data"]

    resp = client.post("/api/worklogs/end", json={"work_log_id": log["id"], "quantity_produced": 1.7, "defect_quantity": 0})

    assert resp.status_code == 400
    assert client.get("/api/worklogs/active").get_json()["data"]["id"] == log["id"]
