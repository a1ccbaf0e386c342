from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..common.datetime_utils import hours, isoformat_or_none
from ..core.enums import PauseState, WorkLogStatus
from ..core.exceptions import DataIntegrityError, InvalidStateError


@dataclass(frozen=True)
class WorkLogPause:
    pause_id: int
    work_log_id: int
    pause_start: datetime
    pause_end: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.pause_end is None

    def duration(self) -> timedelta:
        """Closed pauses only; an open pause contributes nothing."""
        if self.pause_end is None:
            return timedelta(0)
        return self.pause_end - self.pause_start


@dataclass(frozen=True)
class WorkLog:
    """Domain entity: one work session of an actor against one production task."""

    work_log_id: int
    user_id: int
    task_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    quantity_produced: int = 0
    defect_quantity: int = 0
    pauses: Tuple[WorkLogPause, ...] = ()

    @property
    def status(self) -> WorkLogStatus:
        return WorkLogStatus.OPEN if self.end_time is None else WorkLogStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    @property
    def open_pause(self) -> Optional[WorkLogPause]:
        for p in self.pauses:
            if p.is_open:
                return p
        return None

    @property
    def pause_state(self) -> PauseState:
        return PauseState.PAUSED if self.open_pause is not None else PauseState.RUNNING

    @property
    def last_event_time(self) -> datetime:
        """Latest timestamp recorded on the session; new events may not precede it."""
        latest = self.start_time
        for p in self.pauses:
            latest = max(latest, p.pause_end or p.pause_start)
        return latest

    def paused_duration(self) -> timedelta:
        return sum((p.duration() for p in self.pauses), timedelta(0))

    def net_worked_duration(self) -> timedelta:
        """(end - start) minus closed pauses.

        Raises DataIntegrityError when pauses exceed the session; the value is never clamped.
        """
        if self.end_time is None:
            raise InvalidStateError(f"Work log {self.work_log_id} is still open")

        net = (self.end_time - self.start_time) - self.paused_duration()
        if net < timedelta(0):
            raise DataIntegrityError(
                f"Work log {self.work_log_id}: pauses ({self.paused_duration()}) exceed session length"
            )
        return net

    def net_worked_hours(self) -> float:
        return hours(self.net_worked_duration())

    def to_dict(self) -> dict:
        return {
            "id": self.work_log_id,
            "user_id": self.user_id,
            "task_id": self.task_id,
            "status": self.status.value,
            "pause_state": self.pause_state.value if self.is_open else None,
            "start_time": self.start_time.isoformat(),
            "end_time": isoformat_or_none(self.end_time),
            "quantity_produced": self.quantity_produced,
            "defect_quantity": self.defect_quantity,
            "pauses": [
                {"id": p.pause_id, "pause_start": p.pause_start.isoformat(), "pause_end": isoformat_or_none(p.pause_end)}
                for p in self.pauses
            ],
        }
