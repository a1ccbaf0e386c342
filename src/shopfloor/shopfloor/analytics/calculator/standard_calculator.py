from __future__ import annotations

from typing import Optional

from ...tasks.model import TaskNorm
from ...worklogs.model import WorkLog
from .base import EfficiencyCalculator


class StandardEfficiencyCalculator(EfficiencyCalculator):
    """Standard rule: expected = machine norm (units/hour) x net worked hours.

    Every worker is measured against the full machine norm, whatever the number
    of concurrent sessions on the same task. ``max_session_hours`` optionally
    caps the hours counted per session.
    """

    def __init__(self, *, max_session_hours: Optional[float] = None):
        self._max_session_hours = max_session_hours

    def worked_hours(self, log: WorkLog) -> float:
        worked = log.net_worked_hours()
        if self._max_session_hours is not None:
            worked = min(worked, float(self._max_session_hours))
        return worked

    def expected(self, norm: TaskNorm | None, hours: float) -> float:
        if norm is None:
            return 0.0
        return norm.efficiency_norm_per_hour * hours
