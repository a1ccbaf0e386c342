from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Lunch, Shift


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[Shift]:
        raise NotImplementedError

    def get_open_for_user(self, user_id: int) -> Optional[Shift]:
        """The shift with time_in set and time_out unset, if any."""

        raise NotImplementedError

    def create(self, *, user_id: int, work_date: date, planned_start: Optional[datetime] = None) -> int:
        """Insert a shift; raises ConflictError if (user_id, work_date) exists."""

        raise NotImplementedError

    def update_clock_in(self, *, shift_id: int, time_in: datetime, is_late: bool) -> bool:
        raise NotImplementedError

    def update_clock_out(self, *, shift_id: int, time_out: datetime) -> bool:
        raise NotImplementedError

    def update_lunch(self, *, shift_id: int, lunch: Lunch, overtime_minutes: Optional[int] = None) -> bool:
        raise NotImplementedError

    def delete_planned(self, *, shift_id: int) -> bool:
        """Delete only if time_in is still unset."""

        raise NotImplementedError

    def list_range(self, *, start: date, end: date, user_id: Optional[int] = None) -> Sequence[Shift]:
        """Shifts with work_date in [start, end], newest first."""

        raise NotImplementedError
