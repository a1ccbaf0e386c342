from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import MachineStatus, TaskStatus


@dataclass(frozen=True)
class TaskNorm:
    """Read-model: a production task joined with its machine's efficiency norm."""

    task_id: int
    operation: str
    machine_id: int
    machine_name: str
    machine_status: MachineStatus
    efficiency_norm_per_hour: float
    total_quantity: int
    completed_quantity: int
    defect_quantity: int = 0
    status: TaskStatus = TaskStatus.PENDING

    @property
    def machine_available(self) -> bool:
        return self.machine_status == MachineStatus.WORKING

    @property
    def is_fully_completed(self) -> bool:
        return self.completed_quantity >= self.total_quantity
