from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date, timedelta

import pytest

from src.shopfloor.shopfloor.core.enums import MachineStatus, PauseState, TaskStatus, WorkLogStatus
from src.shopfloor.shopfloor.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.shopfloor.shopfloor.tasks.service import ProductionTaskView
from src.shopfloor.shopfloor.worklogs.service import WorkSessionLedger

from tests.fakes import FakeTaskRepo, FakeWorkLogRepo, FixedClock, at

DAY = date(2025, 3, 10)


@pytest.fixture
def tasks():
    repo = FakeTaskRepo()
    repo.add(1, norm=500, total=1000)
    repo.add(2, norm=120, total=50, machine_id=2, machine_name="Press", machine_status=MachineStatus.REPAIR)
    repo.add(3, norm=100, total=100, machine_id=2, machine_name="Press")
    return repo


@pytest.fixture
def worklogs():
    return FakeWorkLogRepo()


@pytest.fixture
def ledger(worklogs, tasks):
    return WorkSessionLedger(worklogs, ProductionTaskView(tasks), clock=FixedClock(at(DAY, 8, 0)))


def test_full_session_updates_task_quantities(ledger, tasks):
    log = ledger.start_session(user_id=1, task_id=1, at=at(DAY, 8, 0))
    paused = ledger.pause_session(work_log_id=log.work_log_id, at=at(DAY, 9, 0))
    assert paused.pause_state == PauseState.PAUSED

    resumed = ledger.resume_session(work_log_id=log.work_log_id, at=at(DAY, 9, 30))
    assert resumed.pause_state == PauseState.RUNNING

    closed = ledger.end_session(work_log_id=log.work_log_id, quantity_produced=900, defect_quantity=10, at=at(DAY, 10, 0))

    assert closed.status == WorkLogStatus.CLOSED
    assert closed.net_worked_duration() == timedelta(hours=1, minutes=30)
    task = tasks.get_norm_and_task(1)
    assert task.completed_quantity == 900
    assert task.defect_quantity == 10
    assert task.status == TaskStatus.PENDING
    assert ledger.get_open_session(1) is None


def test_only_one_open_session_per_user(ledger):
    ledger.start_session(user_id=1, task_id=1, at=at(DAY, 8, 0))

    with pytest.raises(ConflictError):
        ledger.start_session(user_id=1, task_id=3, at=at(DAY, 8, 5))

    other = ledger.start_session(user_id=2, task_id=1, at=at(DAY, 8, 5))
    assert other.user_id == 2


def test_start_requires_known_task_on_working_machine(ledger):
    with pytest.raises(NotFoundError):
        ledger.start_session(user_id=1, task_id=99, at=at(DAY, 8, 0))
    with pytest.raises(InvalidStateError):
        ledger.start_session(user_id=1, task_id=2, at=at(DAY, 8, 0))

    assert ledger.get_open_session(1) is None


def test_pause_rules(ledger):
    log = ledger.start_session(user_id=1, task_id=1, at=at(DAY, 8, 0))

    with pytest.raises(InvalidStateError):
        ledger.resume_session(work_log_id=log.work_log_id, at=at(DAY, 8, 10))

    ledger.pause_session(work_log_id=log.work_log_id, at=at(DAY, 8, 30))
    with pytest.raises(InvalidStateError):
        ledger.pause_session(work_log_id=log.work_log_id, at=at(DAY, 8, 40))
    with pytest.raises(InvalidStateError):
        ledger.end_session(work_log_id=log.work_log_id, quantity_produced=1, defect_quantity=0, at=at(DAY, 9, 0))
    with pytest.raises(ValidationError):
        ledger.resume_session(work_log_id=log.work_log_id, at=at(DAY, 8, 20))

    ledger.resume_session(work_log_id=log.work_log_id, at=at(DAY, 8, 45))
    closed = ledger.end_session(work_log_id=log.work_log_id, quantity_produced=3, defect_quantity=0, at=at(DAY, 9, 30))
    assert closed.status == WorkLogStatus.CLOSED
    assert closed.net_worked_duration() == timedelta(hours=1, minutes=15)


def test_end_rejects_bad_input_and_double_end(ledger):
    log = ledger.start_session(user_id=1, task_id=1, at=at(DAY, 8, 0))

    with pytest.raises(ValidationError):
        ledger.end_session(work_log_id=log.work_log_id, quantity_produced=-1, defect_quantity=0, at=at(DAY, 9, 0))
    with pytest.raises(ValidationError):
        ledger.end_session(work_log_id=log.work_log_id, quantity_produced=1, defect_quantity=0, at=at(DAY, 7, 0))
    with pytest.raises(AuthorizationError):
        ledger.end_session(
            work_log_id=log.work_log_id, quantity_produced=1, defect_quantity=0, at=at(DAY, 9, 0), user_id=2
        )

    ledger.end_session(work_log_id=log.work_log_id, quantity_produced=1, defect_quantity=0, at=at(DAY, 9, 0))
    with pytest.raises(InvalidStateError):
        ledger.end_session(work_log_id=log.work_log_id, quantity_produced=1, defect_quantity=0, at=at(DAY, 9, 5))
    with pytest.raises(InvalidStateError):
        ledger.pause_session(work_log_id=log.work_log_id, at=at(DAY, 9, 10))


def test_unknown_work_log_is_not_found(ledger):
    with pytest.raises(NotFoundError):
        ledger.pause_session(work_log_id=42, at=at(DAY, 9, 0))


def test_task_completes_when_quantity_reached(ledger, tasks):
    first = ledger.start_session(user_id=1, task_id=3, at=at(DAY, 8, 0))
    ledger.end_session(work_log_id=first.work_log_id, quantity_produced=60, defect_quantity=0, at=at(DAY, 9, 0))
    assert tasks.get_norm_and_task(3).status != TaskStatus.COMPLETED

    second = ledger.start_session(user_id=2, task_id=3, at=at(DAY, 9, 0))
    ledger.end_session(work_log_id=second.work_log_id, quantity_produced=40, defect_quantity=2, at=at(DAY, 10, 0))

    task = tasks.get_norm_and_task(3)
    assert task.completed_quantity == 100
    assert task.status == TaskStatus.COMPLETED


def test_close_and_handlers_run_inside_one_transaction(worklogs, tasks):
    calls = []

    @contextmanager
    def transaction():
        calls.append("begin")
        yield
        calls.append("commit")

    ledger = WorkSessionLedger(worklogs, ProductionTaskView(tasks), transaction=transaction)
    ledger.subscribe(lambda event: calls.append(("completed", event.work_log_id, event.quantity_produced)))

    log = ledger.start_session(user_id=1, task_id=1, at=at(DAY, 8, 0))
    ledger.end_session(work_log_id=log.work_log_id, quantity_produced=5, defect_quantity=0, at=at(DAY, 8, 30))

    assert calls == ["begin", ("completed", log.work_log_id, 5), "commit"]


def test_failing_handler_propagates(worklogs, tasks):
    ledger = WorkSessionLedger(worklogs, ProductionTaskView(tasks))

    def boom(event):
        raise RuntimeError("downstream failed")

    ledger.subscribe(boom)
    log = ledger.start_session(user_id=1, task_id=1, at=at(DAY, 8, 0))

    with pytest.raises(RuntimeError):
        ledger.end_session(work_log_id=log.work_log_id, quantity_produced=5, defect_quantity=0, at=at(DAY, 8, 30))


def test_listings(ledger):
    a = ledger.start_session(user_id=1, task_id=1, at=at(DAY, 8, 0))
    ledger.end_session(work_log_id=a.work_log_id, quantity_produced=10, defect_quantity=0, at=at(DAY, 9, 0))
    b = ledger.start_session(user_id=1, task_id=1, at=at(DAY, 10, 0))

    assert [w.work_log_id for w in ledger.list_sessions_for_task(1)] == [b.work_log_id, a.work_log_id]

    closed = ledger.list_sessions_for_actor(user_id=1, start=at(DAY, 0, 0), end=at(DAY, 23, 59))
    assert [w.work_log_id for w in closed] == [a.work_log_id]

    with pytest.raises(ValidationError):
        ledger.list_sessions_for_actor(user_id=1, start=at(DAY, 12, 0), end=at(DAY, 8, 0))


def test_concurrent_starts_for_one_user_allow_a_single_session(ledger):
    barrier = threading.Barrier(8)
    outcomes = []

    def worker():
        barrier.wait()
        try:
            ledger.start_session(user_id=7, task_id=1, at=at(DAY, 8, 0))
            outcomes.append("ok")
        except ConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 7
