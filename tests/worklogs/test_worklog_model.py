from datetime import datetime, timedelta

import pytest

from src.shopfloor.shopfloor.core.enums import PauseState
from src.shopfloor.shopfloor.core.exceptions import DataIntegrityError, InvalidStateError
from src.shopfloor.shopfloor.worklogs.model import WorkLog, WorkLogPause


def _log(end=None, pauses=()):
    return WorkLog(
        work_log_id=1,
        user_id=1,
        task_id=1,
        start_time=datetime(2025, 3, 10, 8, 0),
        end_time=end,
        pauses=tuple(WorkLogPause(pause_id=i, work_log_id=1, pause_start=s, pause_end=e) for i, (s, e) in enumerate(pauses, 1)),
    )


def test_net_worked_subtracts_closed_pauses():
    log = _log(
        end=datetime(2025, 3, 10, 10, 0),
        pauses=[(datetime(2025, 3, 10, 9, 0), datetime(2025, 3, 10, 9, 30))],
    )

    assert log.net_worked_duration() == timedelta(hours=1, minutes=30)
    assert log.net_worked_hours() == 1.5


def test_open_session_has_no_net_duration():
    with pytest.raises(InvalidStateError):
        _log().net_worked_duration()


def test_open_pause_contributes_nothing_and_marks_paused():
    log = _log(pauses=[(datetime(2025, 3, 10, 9, 0), None)])

    assert log.pause_state == PauseState.PAUSED
    assert log.paused_duration() == timedelta(0)
    assert log.last_event_time == datetime(2025, 3, 10, 9, 0)


def test_fully_paused_session_nets_zero():
    log = _log(
        end=datetime(2025, 3, 10, 9, 0),
        pauses=[(datetime(2025, 3, 10, 8, 0), datetime(2025, 3, 10, 9, 0))],
    )

    assert log.net_worked_duration() == timedelta(0)


def test_pauses_longer_than_session_are_a_data_error():
    log = _log(
        end=datetime(2025, 3, 10, 9, 0),
        pauses=[(datetime(2025, 3, 10, 7, 0), datetime(2025, 3, 10, 9, 0))],
    )

    with pytest.raises(DataIntegrityError):
        log.net_worked_duration()
