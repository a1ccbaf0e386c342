from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple


def efficiency_pct(actual: int, expected: float) -> int:
    """100 * actual / expected rounded half up; an explicit 0 when nothing was expected."""
    if expected <= 0:
        return 0
    return math.floor(100 * actual / expected + 0.5)


def defect_rate(actual: int, defects: int) -> float:
    """Share of defective units among all units made, in percent."""
    total = actual + defects
    if total <= 0:
        return 0.0
    return round(100 * defects / total, 2)


@dataclass(frozen=True)
class EfficiencySnapshot:
    window_start: datetime
    window_end: datetime
    total_actual: int
    total_expected: float
    efficiency_pct: int
    session_count: int
    user_id: Optional[int] = None
    task_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "task_id": self.task_id,
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "total_actual": self.total_actual,
            "total_expected": round(self.total_expected, 2),
            "efficiency": self.efficiency_pct,
            "session_count": self.session_count,
        }


@dataclass(frozen=True)
class Contribution:
    work_log_id: int
    user_id: int
    quantity_produced: int
    defect_quantity: int
    net_worked_hours: float
    expected: float
    efficiency_pct: int
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> dict:
        return {
            "work_log_id": self.work_log_id,
            "user_id": self.user_id,
            "quantity_produced": self.quantity_produced,
            "defect_quantity": self.defect_quantity,
            "net_worked_hours": round(self.net_worked_hours, 2),
            "expected": round(self.expected, 2),
            "efficiency": self.efficiency_pct,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
        }


@dataclass(frozen=True)
class TaskContributionReport:
    task_id: int
    operation: Optional[str]
    total_quantity: int
    completed_quantity: int
    contributions: Tuple[Contribution, ...] = ()

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "task_name": self.operation,
            "total_quantity": self.total_quantity,
            "completed_quantity": self.completed_quantity,
            "contributions": [c.to_dict() for c in self.contributions],
        }


@dataclass(frozen=True)
class StatisticsBucket:
    """One group of sessions (a day, a machine, or everything)."""

    key: str
    label: str
    total_actual: int
    total_expected: float
    total_defects: int
    total_hours: float
    session_count: int

    @property
    def efficiency_pct(self) -> int:
        return efficiency_pct(self.total_actual, self.total_expected)

    @property
    def defect_rate(self) -> float:
        return defect_rate(self.total_actual, self.total_defects)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "actual_quantity": self.total_actual,
            "expected_quantity": round(self.total_expected, 2),
            "defects": self.total_defects,
            "hours": round(self.total_hours, 2),
            "sessions": self.session_count,
            "efficiency": self.efficiency_pct,
            "defect_rate": self.defect_rate,
        }


@dataclass(frozen=True)
class ProductionStatistics:
    start_date: date
    end_date: date
    overall: StatisticsBucket
    daily: Tuple[StatisticsBucket, ...] = ()
    by_machine: Tuple[StatisticsBucket, ...] = ()

    def to_dict(self) -> dict:
        return {
            "period": {"start_date": self.start_date.isoformat(), "end_date": self.end_date.isoformat()},
            "overall": self.overall.to_dict(),
            "daily": [b.to_dict() for b in self.daily],
            "by_machine": [b.to_dict() for b in self.by_machine],
        }
