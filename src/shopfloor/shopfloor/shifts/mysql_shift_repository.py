from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_guard
from .model import Lunch, Shift, lunch_from_columns, lunch_to_columns
from .repository import ShiftRepository

_COLUMNS = """
    shift_id, user_id, work_date, planned_start, time_in, time_out,
    lunch_start, lunch_end, lunch_overtime_minutes, is_late
"""


def _row_to_shift(r: dict) -> Shift:
    overtime = r.get("lunch_overtime_minutes")
    return Shift(
        shift_id=int(r["shift_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        planned_start=r.get("planned_start"),
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        lunch=lunch_from_columns(r.get("lunch_start"), r.get("lunch_end")),
        lunch_overtime_minutes=int(overtime) if overtime is not None else None,
        is_late=bool(r.get("is_late")),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, where: str, params: tuple) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE {where}", params)
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        return self._select_one("shift_id=%s", (int(shift_id),))

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[Shift]:
        return self._select_one("user_id=%s AND work_date=%s", (int(user_id), work_date))

    def get_open_for_user(self, user_id: int) -> Optional[Shift]:
        return self._select_one("user_id=%s AND open_marker=1", (int(user_id),))

    def create(self, *, user_id: int, work_date: date, planned_start: Optional[datetime] = None) -> int:
        with unique_guard("Shift already exists for this date"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO shifts(user_id, work_date, planned_start) VALUES(%s,%s,%s)",
                (int(user_id), work_date, planned_start),
            )
            return int(cur.lastrowid)

    def update_clock_in(self, *, shift_id: int, time_in: datetime, is_late: bool) -> bool:
        with unique_guard("Another shift is already open"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shifts SET time_in=%s, is_late=%s WHERE shift_id=%s AND time_in IS NULL",
                (time_in, int(is_late), int(shift_id)),
            )
            return cur.rowcount > 0

    def update_clock_out(self, *, shift_id: int, time_out: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts SET time_out=%s
                WHERE shift_id=%s AND time_in IS NOT NULL AND time_out IS NULL
                """,
                (time_out, int(shift_id)),
            )
            return cur.rowcount > 0

    def update_lunch(self, *, shift_id: int, lunch: Lunch, overtime_minutes: Optional[int] = None) -> bool:
        lunch_start, lunch_end = lunch_to_columns(lunch)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shifts SET lunch_start=%s, lunch_end=%s, lunch_overtime_minutes=%s
                WHERE shift_id=%s
                """,
                (lunch_start, lunch_end, overtime_minutes, int(shift_id)),
            )
            return cur.rowcount > 0

    def delete_planned(self, *, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shifts WHERE shift_id=%s AND time_in IS NULL", (int(shift_id),))
            return cur.rowcount > 0

    def list_range(self, *, start: date, end: date, user_id: Optional[int] = None) -> Sequence[Shift]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shifts WHERE {where} ORDER BY work_date DESC, user_id ASC",
                tuple(params),
            )
            return [_row_to_shift(r) for r in fetchall(cur)]
