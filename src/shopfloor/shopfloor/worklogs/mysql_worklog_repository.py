from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, unique_guard
from .model import WorkLog, WorkLogPause
from .repository import WorkLogRepository

_COLUMNS = "work_log_id, user_id, task_id, start_time, end_time, quantity_produced, defect_quantity"


class MySQLWorkLogRepository(WorkLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, where: str, params: tuple, order_by: str) -> List[WorkLog]:
        cur.execute(f"SELECT {_COLUMNS} FROM work_logs WHERE {where} ORDER BY {order_by}", params)
        rows = fetchall(cur)
        if not rows:
            return []

        ids = [int(r["work_log_id"]) for r in rows]
        placeholders = ",".join(["%s"] * len(ids))
        cur.execute(
            f"""
            SELECT pause_id, work_log_id, pause_start, pause_end
            FROM work_log_pauses
            WHERE work_log_id IN ({placeholders})
            ORDER BY pause_start ASC, pause_id ASC
            """,
            tuple(ids),
        )
        pauses: Dict[int, List[WorkLogPause]] = defaultdict(list)
        for p in fetchall(cur):
            pauses[int(p["work_log_id"])].append(
                WorkLogPause(
                    pause_id=int(p["pause_id"]),
                    work_log_id=int(p["work_log_id"]),
                    pause_start=p["pause_start"],
                    pause_end=p.get("pause_end"),
                )
            )

        return [
            WorkLog(
                work_log_id=int(r["work_log_id"]),
                user_id=int(r["user_id"]),
                task_id=int(r["task_id"]),
                start_time=r["start_time"],
                end_time=r.get("end_time"),
                quantity_produced=int(r.get("quantity_produced") or 0),
                defect_quantity=int(r.get("defect_quantity") or 0),
                pauses=tuple(pauses.get(int(r["work_log_id"]), ())),
            )
            for r in rows
        ]

    def _first(self, where: str, params: tuple) -> Optional[WorkLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            logs = self._load(cur, where, params, "work_log_id")
            return logs[0] if logs else None

    def get_by_id(self, work_log_id: int) -> Optional[WorkLog]:
        return self._first("work_log_id=%s", (int(work_log_id),))

    def get_open_for_user(self, user_id: int) -> Optional[WorkLog]:
        return self._first("user_id=%s AND open_marker=1", (int(user_id),))

    def create(self, *, user_id: int, task_id: int, start_time: datetime) -> int:
        with unique_guard("User already has an active work log"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO work_logs(user_id, task_id, start_time) VALUES(%s,%s,%s)",
                (int(user_id), int(task_id), start_time),
            )
            return int(cur.lastrowid)

    def add_pause(self, *, work_log_id: int, pause_start: datetime) -> int:
        with unique_guard("Work log is already paused"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO work_log_pauses(work_log_id, pause_start) VALUES(%s,%s)",
                (int(work_log_id), pause_start),
            )
            return int(cur.lastrowid)

    def close_pause(self, *, pause_id: int, pause_end: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE work_log_pauses SET pause_end=%s WHERE pause_id=%s AND pause_end IS NULL",
                (pause_end, int(pause_id)),
            )
            return cur.rowcount > 0

    def close(self, *, work_log_id: int, end_time: datetime, quantity_produced: int, defect_quantity: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_logs
                SET end_time=%s, quantity_produced=%s, defect_quantity=%s
                WHERE work_log_id=%s AND end_time IS NULL
                  AND NOT EXISTS (
                      SELECT 1 FROM work_log_pauses p WHERE p.work_log_id=%s AND p.pause_end IS NULL
                  )
                """,
                (end_time, int(quantity_produced), int(defect_quantity), int(work_log_id), int(work_log_id)),
            )
            return cur.rowcount > 0

    def list_for_task(self, task_id: int) -> Sequence[WorkLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, "task_id=%s", (int(task_id),), "start_time DESC, work_log_id DESC")

    def list_closed(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        user_id: Optional[int] = None,
        task_id: Optional[int] = None,
    ) -> Sequence[WorkLog]:
        clauses = ["end_time IS NOT NULL"]
        params: list[object] = []
        if start is not None:
            clauses.append("start_time >= %s")
            params.append(start)
        if end is not None:
            clauses.append("start_time < %s")
            params.append(end)
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if task_id is not None:
            clauses.append("task_id=%s")
            params.append(int(task_id))

        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, " AND ".join(clauses), tuple(params), "start_time ASC, work_log_id ASC")
