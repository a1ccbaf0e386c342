from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional

from ..core.enums import MachineStatus, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import TaskNorm
from .repository import TaskRepository

_SELECT = """
    SELECT
        t.task_id, t.operation, t.total_quantity, t.completed_quantity, t.defect_quantity, t.status,
        m.machine_id, m.name AS machine_name, m.status AS machine_status, m.efficiency_norm
    FROM production_tasks t
    JOIN machines m ON m.machine_id = t.machine_id
"""


def _row_to_norm(r: dict) -> TaskNorm:
    return TaskNorm(
        task_id=int(r["task_id"]),
        operation=r["operation"],
        machine_id=int(r["machine_id"]),
        machine_name=r["machine_name"],
        machine_status=MachineStatus(r["machine_status"]),
        efficiency_norm_per_hour=float(r.get("efficiency_norm") or 0),
        total_quantity=int(r["total_quantity"]),
        completed_quantity=int(r["completed_quantity"]),
        defect_quantity=int(r.get("defect_quantity") or 0),
        status=TaskStatus(r["status"]),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_norm_and_task(self, task_id: int) -> Optional[TaskNorm]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE t.task_id=%s", (int(task_id),))
            r = fetchone(cur)
            return _row_to_norm(r) if r else None

    def get_norms(self, task_ids: Iterable[int]) -> Mapping[int, TaskNorm]:
        ids = sorted({int(t) for t in task_ids})
        if not ids:
            return {}

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE t.task_id IN ({placeholders})", tuple(ids))
            out: Dict[int, TaskNorm] = {}
            for r in fetchall(cur):
                norm = _row_to_norm(r)
                out[norm.task_id] = norm
            return out

    def add_completed(self, *, task_id: int, quantity: int, defects: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE production_tasks
                SET completed_quantity = completed_quantity + %s,
                    defect_quantity = defect_quantity + %s
                WHERE task_id=%s
                """,
                (int(quantity), int(defects), int(task_id)),
            )
            return cur.rowcount > 0

    def set_status(self, *, task_id: int, status: TaskStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE production_tasks SET status=%s WHERE task_id=%s", (status.value, int(task_id)))
            return cur.rowcount > 0
