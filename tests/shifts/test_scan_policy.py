from datetime import date, datetime

import pytest

from src.shopfloor.shopfloor.core.enums import QRPointType, ScanAction
from src.shopfloor.shopfloor.core.exceptions import InvalidStateError
from src.shopfloor.shopfloor.shifts.model import Lunch, Shift
from src.shopfloor.shopfloor.shifts.scan_policy import ScanPolicy

DAY = date(2025, 3, 10)


def _shift(**kw):
    return Shift(shift_id=1, user_id=1, work_date=DAY, **kw)


def test_entrance_without_shift_clocks_in():
    policy = ScanPolicy()
    assert policy.decide(point_type=QRPointType.ENTRANCE, open_shift=None, today_shift=None) == ScanAction.CLOCK_IN
    planned = _shift(planned_start=datetime(2025, 3, 10, 8, 0))
    assert policy.decide(point_type=QRPointType.EXIT, open_shift=None, today_shift=planned) == ScanAction.CLOCK_IN


def test_exit_or_entrance_with_open_shift_clocks_out():
    open_shift = _shift(time_in=datetime(2025, 3, 10, 8, 0))
    for point_type in (QRPointType.ENTRANCE, QRPointType.EXIT):
        decided = ScanPolicy().decide(point_type=point_type, open_shift=open_shift, today_shift=open_shift)
        assert decided == ScanAction.CLOCK_OUT


def test_closed_shift_today_is_rejected():
    closed = _shift(time_in=datetime(2025, 3, 10, 8, 0), time_out=datetime(2025, 3, 10, 16, 0))
    with pytest.raises(InvalidStateError):
        ScanPolicy().decide(point_type=QRPointType.ENTRANCE, open_shift=None, today_shift=closed)


def test_lunch_actions_follow_lunch_state():
    policy = ScanPolicy()
    time_in = datetime(2025, 3, 10, 8, 0)
    noon = datetime(2025, 3, 10, 12, 0)

    fresh = _shift(time_in=time_in)
    eating = _shift(time_in=time_in, lunch=Lunch.in_progress(noon))
    assert policy.decide(point_type=QRPointType.LUNCH, open_shift=fresh, today_shift=fresh) == ScanAction.LUNCH_START
    assert policy.decide(point_type=QRPointType.BREAK_AREA, open_shift=eating, today_shift=eating) == ScanAction.LUNCH_END

    for lunch in (Lunch.taken(noon, datetime(2025, 3, 10, 13, 0)), Lunch.skipped()):
        done = _shift(time_in=time_in, lunch=lunch)
        with pytest.raises(InvalidStateError):
            policy.lunch_action(done)


def test_lateness_uses_grace_window():
    policy = ScanPolicy(grace_minutes=5)
    planned = datetime(2025, 3, 10, 8, 0)

    assert policy.is_late(planned_start=None, time_in=datetime(2025, 3, 10, 11, 0)) is False
    assert policy.is_late(planned_start=planned, time_in=datetime(2025, 3, 10, 8, 5)) is False
    assert policy.is_late(planned_start=planned, time_in=datetime(2025, 3, 10, 8, 6)) is True
