from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from ..common.datetime_utils import Clock, minutes_between, now_local
from ..common.locks import KeyedLock
from ..common.validators import require_not_before
from ..core.constants import DEFAULT_STANDARD_LUNCH_MINUTES
from ..core.enums import LunchStatus, QRPointType, Role, ScanAction
from ..core.exceptions import AuthorizationError, ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..qr.service import QRPointRegistry
from .model import Lunch, Shift
from .repository import ShiftRepository
from .scan_policy import ScanPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    action: ScanAction
    shift: Shift

    def to_dict(self) -> dict:
        return {"action": self.action.value, "shift": self.shift.to_dict()}


class ShiftLedger:
    """Owns Shift records: planning, scan-driven clock in/out and the lunch state machine.

    All mutations for one actor run under that actor's lock.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        qr_points: Optional[QRPointRegistry] = None,
        *,
        policy: Optional[ScanPolicy] = None,
        clock: Clock = now_local,
        locks: Optional[KeyedLock] = None,
        standard_lunch_minutes: int = DEFAULT_STANDARD_LUNCH_MINUTES,
    ):
        self._shifts = shifts
        self._qr_points = qr_points
        self._policy = policy or ScanPolicy()
        self._clock = clock
        self._locks = locks or KeyedLock()
        self._standard_lunch_minutes = int(standard_lunch_minutes)

    def _reload(self, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(shift_id)
        if not shift:
            raise NotFoundError("Shift not found")
        return shift

    # ----- planning -----

    def plan_shift(self, *, user_id: int, work_date: date, planned_start: Optional[datetime] = None) -> Shift:
        if work_date < self._clock().date():
            raise ConflictError("Cannot plan a shift in the past")

        with self._locks.hold(user_id):
            if self._shifts.get_for_user_and_date(user_id, work_date):
                raise ConflictError("Shift already exists for this date")
            shift_id = self._shifts.create(user_id=user_id, work_date=work_date, planned_start=planned_start)

        logger.info("shift %s planned for user %s on %s (start=%s)", shift_id, user_id, work_date, planned_start)
        return self._reload(shift_id)

    def cancel_planned_shift(self, *, shift_id: int, current_user_id: int, current_role: Role) -> None:
        shift = self._reload(shift_id)
        if current_role != Role.ADMIN and shift.user_id != current_user_id:
            raise AuthorizationError("You can only cancel your own shifts")

        with self._locks.hold(shift.user_id):
            shift = self._reload(shift_id)
            if shift.time_in is not None:
                raise InvalidStateError("Cannot cancel a shift that has already started")
            if not self._shifts.delete_planned(shift_id=shift_id):
                raise InvalidStateError("Cannot cancel a shift that has already started")

        logger.info("planned shift %s of user %s cancelled", shift_id, shift.user_id)

    # ----- scans -----

    def scan_token(self, *, user_id: int, token: str, at: Optional[datetime] = None) -> ScanResult:
        if self._qr_points is None:
            raise NotFoundError("QR registry is not configured")
        point = self._qr_points.resolve(token)
        return self.process_scan(user_id=user_id, point_type=point.point_type, at=at)

    def process_scan(self, *, user_id: int, point_type: QRPointType, at: Optional[datetime] = None) -> ScanResult:
        at = at or self._clock()

        with self._locks.hold(user_id):
            open_shift = self._shifts.get_open_for_user(user_id)
            today_shift = self._shifts.get_for_user_and_date(user_id, at.date())
            action = self._policy.decide(point_type=point_type, open_shift=open_shift, today_shift=today_shift)

            if action == ScanAction.CLOCK_IN:
                shift = self._clock_in(user_id, today_shift, at)
            elif action == ScanAction.CLOCK_OUT:
                shift = self._clock_out(open_shift, at)
            elif action == ScanAction.LUNCH_START:
                shift = self._start_lunch(open_shift, at)
            else:
                shift = self._end_lunch(open_shift, at)

        return ScanResult(action=action, shift=shift)

    def _clock_in(self, user_id: int, today_shift: Optional[Shift], at: datetime) -> Shift:
        if today_shift is None:
            shift_id = self._shifts.create(user_id=user_id, work_date=at.date())
            planned_start = None
        else:
            shift_id = today_shift.shift_id
            planned_start = today_shift.planned_start

        is_late = self._policy.is_late(planned_start=planned_start, time_in=at)
        if not self._shifts.update_clock_in(shift_id=shift_id, time_in=at, is_late=is_late):
            raise InvalidStateError("Shift already started")

        logger.info("user %s clocked in at %s (shift %s, late=%s)", user_id, at.isoformat(), shift_id, is_late)
        return self._reload(shift_id)

    def _clock_out(self, shift: Shift, at: datetime) -> Shift:
        require_not_before(at, shift.time_in, "clock-in")
        if shift.lunch.is_open:
            raise InvalidStateError("Lunch is still in progress; end lunch before clocking out")
        require_not_before(at, shift.lunch.end, "lunch end")

        if not self._shifts.update_clock_out(shift_id=shift.shift_id, time_out=at):
            raise InvalidStateError("Shift is not open")

        logger.info("user %s clocked out at %s (shift %s)", shift.user_id, at.isoformat(), shift.shift_id)
        return self._reload(shift.shift_id)

    # ----- lunch state machine -----

    def _require_open_shift(self, user_id: int) -> Shift:
        shift = self._shifts.get_open_for_user(user_id)
        if not shift:
            raise InvalidStateError("No open shift; scan the entrance first")
        return shift

    def _start_lunch(self, shift: Shift, at: datetime) -> Shift:
        if shift.lunch.status == LunchStatus.SKIPPED:
            raise InvalidStateError("Lunch was marked as skipped")
        if shift.lunch.status != LunchStatus.NOT_TAKEN:
            raise InvalidStateError("Lunch already started")
        require_not_before(at, shift.time_in, "clock-in")

        self._shifts.update_lunch(shift_id=shift.shift_id, lunch=Lunch.in_progress(at))
        logger.info("user %s started lunch at %s", shift.user_id, at.isoformat())
        return self._reload(shift.shift_id)

    def _end_lunch(self, shift: Shift, at: datetime) -> Shift:
        if shift.lunch.status in (LunchStatus.NOT_TAKEN, LunchStatus.SKIPPED):
            raise InvalidStateError("Lunch not started")
        if shift.lunch.status == LunchStatus.TAKEN:
            raise InvalidStateError("Lunch already ended")
        require_not_before(at, shift.lunch.start, "lunch start")

        duration = minutes_between(shift.lunch.start, at)
        overtime = duration - self._standard_lunch_minutes if duration > self._standard_lunch_minutes else None
        self._shifts.update_lunch(
            shift_id=shift.shift_id,
            lunch=Lunch.taken(shift.lunch.start, at),
            overtime_minutes=overtime,
        )
        logger.info("user %s ended lunch at %s (%s min)", shift.user_id, at.isoformat(), duration)
        return self._reload(shift.shift_id)

    def start_lunch(self, user_id: int, at: Optional[datetime] = None) -> Shift:
        at = at or self._clock()
        with self._locks.hold(user_id):
            return self._start_lunch(self._require_open_shift(user_id), at)

    def end_lunch(self, user_id: int, at: Optional[datetime] = None) -> Shift:
        at = at or self._clock()
        with self._locks.hold(user_id):
            return self._end_lunch(self._require_open_shift(user_id), at)

    def mark_no_lunch(self, user_id: int) -> Shift:
        with self._locks.hold(user_id):
            shift = self._require_open_shift(user_id)
            if shift.lunch.status == LunchStatus.SKIPPED:
                raise InvalidStateError("Lunch already marked as skipped")
            if shift.lunch.status != LunchStatus.NOT_TAKEN:
                raise InvalidStateError("Lunch already started")

            self._shifts.update_lunch(shift_id=shift.shift_id, lunch=Lunch.skipped())
            logger.info("user %s marked no lunch (shift %s)", user_id, shift.shift_id)
            return self._reload(shift.shift_id)

    # ----- reads -----

    def get_shift(self, *, shift_id: int, current_user_id: int, current_role: Role) -> Shift:
        shift = self._reload(shift_id)
        if current_role != Role.ADMIN and shift.user_id != current_user_id:
            raise AuthorizationError("You can only view your own shifts")
        return shift

    def get_current_shift(self, user_id: int, day: Optional[date] = None) -> Optional[Shift]:
        return self._shifts.get_for_user_and_date(user_id, day or self._clock().date())

    def list_shifts_for_window(self, *, start: date, end: date, user_id: Optional[int] = None) -> Sequence[Shift]:
        if end < start:
            raise ValidationError("end must not be before start")
        return self._shifts.list_range(start=start, end=end, user_id=user_id)

    def shift_calendar(self, *, start: date, end: date) -> Dict[str, List[Shift]]:
        calendar: Dict[str, List[Shift]] = {}
        for shift in self.list_shifts_for_window(start=start, end=end):
            calendar.setdefault(shift.work_date.strftime("%Y-%m-%d"), []).append(shift)
        return calendar
