from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import WorkLog


class WorkLogRepository(Protocol):
    """WorkLogs are always returned with their pauses, ordered by pause_start."""

    def get_by_id(self, work_log_id: int) -> Optional[WorkLog]:
        raise NotImplementedError

    def get_open_for_user(self, user_id: int) -> Optional[WorkLog]:
        raise NotImplementedError

    def create(self, *, user_id: int, task_id: int, start_time: datetime) -> int:
        """Raises ConflictError if the user already has an open work log."""

        raise NotImplementedError

    def add_pause(self, *, work_log_id: int, pause_start: datetime) -> int:
        """Raises ConflictError if the work log already has an open pause."""

        raise NotImplementedError

    def close_pause(self, *, pause_id: int, pause_end: datetime) -> bool:
        raise NotImplementedError

    def close(self, *, work_log_id: int, end_time: datetime, quantity_produced: int, defect_quantity: int) -> bool:
        """Set end_time and quantities only if the log is still open."""

        raise NotImplementedError

    def list_for_task(self, task_id: int) -> Sequence[WorkLog]:
        """All sessions (open and closed), newest first."""

        raise NotImplementedError

    def list_closed(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        user_id: Optional[int] = None,
        task_id: Optional[int] = None,
    ) -> Sequence[WorkLog]:
        """Closed sessions with start_time in [start, end), oldest first."""

        raise NotImplementedError
