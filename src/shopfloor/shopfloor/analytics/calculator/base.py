from __future__ import annotations

from abc import ABC, abstractmethod

from ...tasks.model import TaskNorm
from ...worklogs.model import WorkLog


class EfficiencyCalculator(ABC):
    """Calculator interface (Strategy Pattern for expected output)."""

    @abstractmethod
    def worked_hours(self, log: WorkLog) -> float:
        raise NotImplementedError

    @abstractmethod
    def expected(self, norm: TaskNorm | None, hours: float) -> float:
        raise NotImplementedError
