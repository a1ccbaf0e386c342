from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import datetime
from typing import Callable, ContextManager, List, Optional, Sequence

from ..common.datetime_utils import Clock, now_local
from ..common.locks import KeyedLock
from ..common.validators import require_non_negative, require_not_before
from ..core.exceptions import AuthorizationError, ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..tasks.service import ProductionTaskView
from .events import SessionCompleted, SessionCompletedHandler
from .model import WorkLog
from .repository import WorkLogRepository

logger = logging.getLogger(__name__)


class WorkSessionLedger:
    """Owns WorkLog/WorkLogPause records.

    At most one open WorkLog per actor (any task) and at most one open pause
    per WorkLog. Mutations run under the owning actor's lock; closing a session
    and publishing ``SessionCompleted`` happen inside one storage transaction.
    """

    def __init__(
        self,
        worklogs: WorkLogRepository,
        tasks: ProductionTaskView,
        *,
        clock: Clock = now_local,
        locks: Optional[KeyedLock] = None,
        transaction: Callable[[], ContextManager] = nullcontext,
    ):
        self._worklogs = worklogs
        self._tasks = tasks
        self._clock = clock
        self._locks = locks or KeyedLock()
        self._transaction = transaction
        self._handlers: List[SessionCompletedHandler] = [tasks.on_session_completed]

    def subscribe(self, handler: SessionCompletedHandler) -> None:
        self._handlers.append(handler)

    def _get(self, work_log_id: int) -> WorkLog:
        log = self._worklogs.get_by_id(int(work_log_id))
        if not log:
            raise NotFoundError("Work log not found")
        return log

    def _get_owned(self, work_log_id: int, user_id: Optional[int]) -> WorkLog:
        log = self._get(work_log_id)
        if user_id is not None and log.user_id != user_id:
            raise AuthorizationError("Work log belongs to another user")
        return log

    def start_session(self, *, user_id: int, task_id: int, at: Optional[datetime] = None) -> WorkLog:
        at = at or self._clock()

        with self._locks.hold(user_id):
            if self._worklogs.get_open_for_user(user_id):
                raise ConflictError("User already has an active work log")
            self._tasks.require_startable(task_id)
            work_log_id = self._worklogs.create(user_id=user_id, task_id=int(task_id), start_time=at)

        logger.info("work log %s started: task %s, user %s, at %s", work_log_id, task_id, user_id, at.isoformat())
        return self._get(work_log_id)

    def pause_session(self, *, work_log_id: int, at: Optional[datetime] = None, user_id: Optional[int] = None) -> WorkLog:
        at = at or self._clock()
        owner = self._get_owned(work_log_id, user_id).user_id

        with self._locks.hold(owner):
            log = self._get(work_log_id)
            if not log.is_open:
                raise InvalidStateError("Work log already ended")
            if log.open_pause is not None:
                raise InvalidStateError("Work log is already paused")
            require_not_before(at, log.last_event_time, "the last session event")
            self._worklogs.add_pause(work_log_id=log.work_log_id, pause_start=at)

        logger.info("work log %s paused at %s", work_log_id, at.isoformat())
        return self._get(work_log_id)

    def resume_session(self, *, work_log_id: int, at: Optional[datetime] = None, user_id: Optional[int] = None) -> WorkLog:
        at = at or self._clock()
        owner = self._get_owned(work_log_id, user_id).user_id

        with self._locks.hold(owner):
            log = self._get(work_log_id)
            pause = log.open_pause
            if pause is None:
                raise InvalidStateError("Work log is not paused")
            require_not_before(at, pause.pause_start, "pause start")
            if not self._worklogs.close_pause(pause_id=pause.pause_id, pause_end=at):
                raise InvalidStateError("Work log is not paused")

        logger.info("work log %s resumed at %s (paused %s)", work_log_id, at.isoformat(), at - pause.pause_start)
        return self._get(work_log_id)

    def end_session(
        self,
        *,
        work_log_id: int,
        quantity_produced: int,
        defect_quantity: int,
        at: Optional[datetime] = None,
        user_id: Optional[int] = None,
    ) -> WorkLog:
        at = at or self._clock()
        quantity_produced = require_non_negative(quantity_produced, "quantity_produced")
        defect_quantity = require_non_negative(defect_quantity, "defect_quantity")
        owner = self._get_owned(work_log_id, user_id).user_id

        with self._locks.hold(owner):
            log = self._get(work_log_id)
            if not log.is_open:
                raise InvalidStateError("Work log already ended")
            if log.open_pause is not None:
                raise InvalidStateError("Work log is paused; resume before ending")
            require_not_before(at, log.last_event_time, "the last session event")

            event = SessionCompleted(
                work_log_id=log.work_log_id,
                user_id=log.user_id,
                task_id=log.task_id,
                start_time=log.start_time,
                end_time=at,
                quantity_produced=quantity_produced,
                defect_quantity=defect_quantity,
            )
            with self._transaction():
                if not self._worklogs.close(
                    work_log_id=log.work_log_id,
                    end_time=at,
                    quantity_produced=quantity_produced,
                    defect_quantity=defect_quantity,
                ):
                    raise InvalidStateError("Work log already ended")
                for handler in self._handlers:
                    handler(event)

        closed = self._get(work_log_id)
        logger.info(
            "work log %s ended: task %s, produced %s, defects %s, net %s",
            work_log_id,
            closed.task_id,
            quantity_produced,
            defect_quantity,
            closed.net_worked_duration(),
        )
        return closed

    def get_open_session(self, user_id: int) -> Optional[WorkLog]:
        return self._worklogs.get_open_for_user(user_id)

    def list_sessions_for_task(self, task_id: int) -> Sequence[WorkLog]:
        return self._worklogs.list_for_task(int(task_id))

    def list_sessions_for_actor(self, *, user_id: int, start: datetime, end: datetime) -> Sequence[WorkLog]:
        if end < start:
            raise ValidationError("end must not be before start")
        return self._worklogs.list_closed(start=start, end=end, user_id=user_id)
