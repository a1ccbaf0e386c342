from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional

from ..common.datetime_utils import Clock, dates_window, now_local
from ..core.exceptions import ValidationError
from ..tasks.model import TaskNorm
from ..tasks.repository import TaskRepository
from ..worklogs.model import WorkLog
from ..worklogs.repository import WorkLogRepository
from .calculator.base import EfficiencyCalculator
from .calculator.standard_calculator import StandardEfficiencyCalculator
from .model import (
    Contribution,
    EfficiencySnapshot,
    ProductionStatistics,
    StatisticsBucket,
    TaskContributionReport,
    efficiency_pct,
)


@dataclass
class _Totals:
    key: str
    label: str
    actual: int = 0
    expected: float = 0.0
    defects: int = 0
    hours: float = 0.0
    sessions: int = 0

    def add(self, *, actual: int, expected: float, defects: int, hours: float) -> None:
        self.actual += actual
        self.expected += expected
        self.defects += defects
        self.hours += hours
        self.sessions += 1

    def freeze(self) -> StatisticsBucket:
        return StatisticsBucket(
            key=self.key,
            label=self.label,
            total_actual=self.actual,
            total_expected=self.expected,
            total_defects=self.defects,
            total_hours=self.hours,
            session_count=self.sessions,
        )


class EfficiencyAggregator:
    """Read-side efficiency analytics over closed WorkLogs.

    Performs no writes and takes no ledger locks. Missing data yields
    zero-valued results rather than errors.
    """

    def __init__(
        self,
        worklogs: WorkLogRepository,
        tasks: TaskRepository,
        *,
        calculator: Optional[EfficiencyCalculator] = None,
        clock: Clock = now_local,
    ):
        self._worklogs = worklogs
        self._tasks = tasks
        self._calculator = calculator or StandardEfficiencyCalculator()
        self._clock = clock

    def _norms_for(self, logs: Iterable[WorkLog]) -> Mapping[int, TaskNorm]:
        return self._tasks.get_norms({log.task_id for log in logs})

    def actor_efficiency(self, *, user_id: int, window_start: datetime, window_end: datetime) -> EfficiencySnapshot:
        if window_end < window_start:
            raise ValidationError("window_end must not be before window_start")

        logs = self._worklogs.list_closed(start=window_start, end=window_end, user_id=user_id)
        norms = self._norms_for(logs)

        total_actual = 0
        total_expected = 0.0
        for log in logs:
            hours = self._calculator.worked_hours(log)
            total_actual += log.quantity_produced
            total_expected += self._calculator.expected(norms.get(log.task_id), hours)

        return EfficiencySnapshot(
            user_id=user_id,
            window_start=window_start,
            window_end=window_end,
            total_actual=total_actual,
            total_expected=total_expected,
            efficiency_pct=efficiency_pct(total_actual, total_expected),
            session_count=len(logs),
        )

    def employees_efficiency(
        self, *, window_start: datetime, window_end: datetime, user_ids: Optional[Iterable[int]] = None
    ) -> List[EfficiencySnapshot]:
        """One snapshot per actor, best first.

        Without ``user_ids`` every actor with a closed session in the window is ranked.
        """
        if user_ids is None:
            logs = self._worklogs.list_closed(start=window_start, end=window_end)
            user_ids = sorted({log.user_id for log in logs})

        snapshots = [
            self.actor_efficiency(user_id=uid, window_start=window_start, window_end=window_end) for uid in user_ids
        ]
        return sorted(snapshots, key=lambda s: s.efficiency_pct, reverse=True)

    def task_contribution(self, task_id: int) -> TaskContributionReport:
        norm = self._tasks.get_norm_and_task(int(task_id))
        logs = self._worklogs.list_closed(task_id=int(task_id))

        contributions = []
        for log in logs:
            hours = self._calculator.worked_hours(log)
            expected = self._calculator.expected(norm, hours)
            contributions.append(
                Contribution(
                    work_log_id=log.work_log_id,
                    user_id=log.user_id,
                    quantity_produced=log.quantity_produced,
                    defect_quantity=log.defect_quantity,
                    net_worked_hours=hours,
                    expected=expected,
                    efficiency_pct=efficiency_pct(log.quantity_produced, expected),
                    start_time=log.start_time,
                    end_time=log.end_time,
                )
            )

        return TaskContributionReport(
            task_id=int(task_id),
            operation=norm.operation if norm else None,
            total_quantity=norm.total_quantity if norm else 0,
            completed_quantity=norm.completed_quantity if norm else 0,
            contributions=tuple(contributions),
        )

    def production_statistics(
        self, *, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> ProductionStatistics:
        today = self._clock().date()
        start_date = start_date or today.replace(day=1)
        end_date = end_date or today
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date")

        window_start, window_end = dates_window(start_date, end_date)
        logs = self._worklogs.list_closed(start=window_start, end=window_end)
        norms = self._norms_for(logs)

        overall = _Totals(key="overall", label="Overall")
        daily: Dict[str, _Totals] = {}
        by_machine: Dict[str, _Totals] = {}

        for log in logs:
            norm = norms.get(log.task_id)
            hours = self._calculator.worked_hours(log)
            figures = dict(
                actual=log.quantity_produced,
                expected=self._calculator.expected(norm, hours),
                defects=log.defect_quantity,
                hours=hours,
            )

            day_key = log.start_time.date().isoformat()
            if norm:
                machine_key, machine_label = str(norm.machine_id), norm.machine_name
            else:
                machine_key, machine_label = "unknown", "Unknown machine"

            overall.add(**figures)
            daily.setdefault(day_key, _Totals(key=day_key, label=day_key)).add(**figures)
            by_machine.setdefault(machine_key, _Totals(key=machine_key, label=machine_label)).add(**figures)

        daily_buckets = sorted((t.freeze() for t in daily.values()), key=lambda b: b.key)
        machine_buckets = sorted((t.freeze() for t in by_machine.values()), key=lambda b: b.efficiency_pct, reverse=True)

        return ProductionStatistics(
            start_date=start_date,
            end_date=end_date,
            overall=overall.freeze(),
            daily=tuple(daily_buckets),
            by_machine=tuple(machine_buckets),
        )
