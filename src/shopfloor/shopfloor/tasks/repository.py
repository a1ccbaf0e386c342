from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol

from ..core.enums import TaskStatus
from .model import TaskNorm


class TaskRepository(Protocol):
    def get_norm_and_task(self, task_id: int) -> Optional[TaskNorm]:
        raise NotImplementedError

    def get_norms(self, task_ids: Iterable[int]) -> Mapping[int, TaskNorm]:
        """Bulk lookup; unknown ids are simply absent from the result."""

        raise NotImplementedError

    def add_completed(self, *, task_id: int, quantity: int, defects: int) -> bool:
        """Relative increment of completed and defect quantities."""

        raise NotImplementedError

    def set_status(self, *, task_id: int, status: TaskStatus) -> bool:
        raise NotImplementedError
