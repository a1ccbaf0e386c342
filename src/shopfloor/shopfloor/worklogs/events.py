from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable


@dataclass(frozen=True)
class SessionCompleted:
    """Emitted once per WorkLog when it is closed."""

    work_log_id: int
    user_id: int
    task_id: int
    start_time: datetime
    end_time: datetime
    quantity_produced: int
    defect_quantity: int


SessionCompletedHandler = Callable[[SessionCompleted], None]
