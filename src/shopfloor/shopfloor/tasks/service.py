from __future__ import annotations

import logging

from ..core.enums import TaskStatus
from ..core.exceptions import InvalidStateError, NotFoundError
from ..worklogs.events import SessionCompleted
from .model import TaskNorm
from .repository import TaskRepository

logger = logging.getLogger(__name__)


class ProductionTaskView:
    """Task quantities and machine norms as seen by the ledgers.

    Read by the aggregator; written only through ``on_session_completed``.
    """

    def __init__(self, tasks: TaskRepository):
        self._tasks = tasks

    def norm_and_task(self, task_id: int) -> TaskNorm:
        norm = self._tasks.get_norm_and_task(int(task_id))
        if not norm:
            raise NotFoundError("Task not found")
        return norm

    def require_startable(self, task_id: int) -> TaskNorm:
        norm = self.norm_and_task(task_id)
        if not norm.machine_available:
            raise InvalidStateError(f"Cannot start work: machine {norm.machine_name} is {norm.machine_status.value}")
        return norm

    def on_session_completed(self, event: SessionCompleted) -> None:
        self._tasks.add_completed(
            task_id=event.task_id,
            quantity=event.quantity_produced,
            defects=event.defect_quantity,
        )
        norm = self.norm_and_task(event.task_id)

        if norm.is_fully_completed and norm.status != TaskStatus.COMPLETED:
            self._tasks.set_status(task_id=norm.task_id, status=TaskStatus.COMPLETED)
            logger.info("task %s completed (%s/%s)", norm.task_id, norm.completed_quantity, norm.total_quantity)
        elif not norm.is_fully_completed and norm.status == TaskStatus.COMPLETED:
            self._tasks.set_status(task_id=norm.task_id, status=TaskStatus.IN_PROGRESS)
            logger.warning(
                "task %s was COMPLETED but only %s/%s done; back to IN_PROGRESS",
                norm.task_id,
                norm.completed_quantity,
                norm.total_quantity,
            )
