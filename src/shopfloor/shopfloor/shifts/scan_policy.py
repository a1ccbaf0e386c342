from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import LunchStatus, QRPointType, ScanAction
from ..core.exceptions import InvalidStateError
from .model import Shift

ATTENDANCE_POINTS = frozenset({QRPointType.ENTRANCE, QRPointType.EXIT})
LUNCH_POINTS = frozenset({QRPointType.LUNCH, QRPointType.BREAK_AREA})


@dataclass(frozen=True)
class ScanPolicy:
    """Decision table for scans: the action depends on shift state, not on scan type alone.

    ENTRANCE/EXIT
      open shift (any day)            -> CLOCK_OUT
      today's shift already closed    -> InvalidStateError
      otherwise                       -> CLOCK_IN (today's shift, created if not planned)
    LUNCH/BREAK_AREA
      no open shift                   -> InvalidStateError
      lunch NOT_TAKEN                 -> LUNCH_START
      lunch IN_PROGRESS               -> LUNCH_END
      lunch TAKEN/SKIPPED             -> InvalidStateError
    """

    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES

    def decide(self, *, point_type: QRPointType, open_shift: Optional[Shift], today_shift: Optional[Shift]) -> ScanAction:
        if point_type in ATTENDANCE_POINTS:
            if open_shift is not None:
                return ScanAction.CLOCK_OUT
            if today_shift is not None and today_shift.time_in is not None:
                raise InvalidStateError("Shift already completed today")
            return ScanAction.CLOCK_IN

        if point_type in LUNCH_POINTS:
            if open_shift is None:
                raise InvalidStateError("No open shift; scan the entrance first")
            return self.lunch_action(open_shift)

        raise InvalidStateError(f"Unsupported QR point type: {point_type}")

    def lunch_action(self, shift: Shift) -> ScanAction:
        status = shift.lunch.status
        if status == LunchStatus.NOT_TAKEN:
            return ScanAction.LUNCH_START
        if status == LunchStatus.IN_PROGRESS:
            return ScanAction.LUNCH_END
        if status == LunchStatus.SKIPPED:
            raise InvalidStateError("Lunch was marked as skipped")
        raise InvalidStateError("Lunch already taken")

    def is_late(self, *, planned_start: Optional[datetime], time_in: datetime) -> bool:
        if planned_start is None:
            return False
        return time_in > planned_start + timedelta(minutes=self.grace_minutes)
