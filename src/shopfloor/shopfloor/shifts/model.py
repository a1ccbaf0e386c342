from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional

from ..core.constants import NO_LUNCH_MARKER
from ..core.enums import LunchStatus, ShiftStatus


@dataclass(frozen=True)
class Lunch:
    """Lunch sub-state of a shift as an explicit variant.

    ``NOT_TAKEN`` and ``SKIPPED`` carry no timestamps, ``IN_PROGRESS`` carries
    ``start``, ``TAKEN`` carries both.
    """

    status: LunchStatus = LunchStatus.NOT_TAKEN
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def not_taken(cls) -> "Lunch":
        return cls(LunchStatus.NOT_TAKEN)

    @classmethod
    def in_progress(cls, start: datetime) -> "Lunch":
        return cls(LunchStatus.IN_PROGRESS, start=start)

    @classmethod
    def taken(cls, start: datetime, end: datetime) -> "Lunch":
        return cls(LunchStatus.TAKEN, start=start, end=end)

    @classmethod
    def skipped(cls) -> "Lunch":
        return cls(LunchStatus.SKIPPED)

    @property
    def is_open(self) -> bool:
        return self.status == LunchStatus.IN_PROGRESS


def lunch_from_columns(lunch_start: Optional[datetime], lunch_end: Optional[datetime]) -> Lunch:
    """Decode the stored (lunch_start, lunch_end) pair.

    The no-lunch marker in lunch_start means SKIPPED regardless of lunch_end
    (older rows stored the marker in both columns).
    """
    if lunch_start is None:
        return Lunch.not_taken()
    if lunch_start == NO_LUNCH_MARKER:
        return Lunch.skipped()
    if lunch_end is None:
        return Lunch.in_progress(lunch_start)
    return Lunch.taken(lunch_start, lunch_end)


def lunch_to_columns(lunch: Lunch) -> tuple[Optional[datetime], Optional[datetime]]:
    if lunch.status == LunchStatus.SKIPPED:
        return NO_LUNCH_MARKER, None
    return lunch.start, lunch.end


@dataclass(frozen=True)
class Shift:
    """Domain entity: one actor's attendance record for one calendar day."""

    shift_id: int
    user_id: int
    work_date: date
    planned_start: Optional[datetime] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    lunch: Lunch = field(default_factory=Lunch.not_taken)
    lunch_overtime_minutes: Optional[int] = None
    is_late: bool = False

    @property
    def status(self) -> ShiftStatus:
        if self.time_in is None:
            return ShiftStatus.PLANNED
        if self.time_out is None:
            return ShiftStatus.OPEN
        return ShiftStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.status == ShiftStatus.OPEN

    def with_changes(self, **changes) -> "Shift":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "id": self.shift_id,
            "user_id": self.user_id,
            "date": self.work_date.strftime("%Y-%m-%d"),
            "status": self.status.value,
            "planned_start": self.planned_start.isoformat() if self.planned_start else None,
            "time_in": self.time_in.isoformat() if self.time_in else None,
            "time_out": self.time_out.isoformat() if self.time_out else None,
            "lunch": {
                "status": self.lunch.status.value,
                "start": self.lunch.start.isoformat() if self.lunch.start else None,
                "end": self.lunch.end.isoformat() if self.lunch.end else None,
                "overtime_minutes": self.lunch_overtime_minutes,
            },
            "is_late": self.is_late,
        }
