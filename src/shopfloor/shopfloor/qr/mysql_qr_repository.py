from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import QRPointType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_guard
from .model import QRPoint
from .repository import QRPointRepository


def _row_to_point(r: dict) -> QRPoint:
    return QRPoint(
        point_id=int(r["point_id"]),
        token=r["token"],
        point_type=QRPointType(r["point_type"]),
        name=r["name"],
        created_at=r.get("created_at"),
    )


class MySQLQRPointRepository(QRPointRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_token(self, token: str) -> Optional[QRPoint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT point_id, token, point_type, name, created_at FROM qr_points WHERE token=%s",
                (token,),
            )
            r = fetchone(cur)
            return _row_to_point(r) if r else None

    def list_all(self) -> Sequence[QRPoint]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT point_id, token, point_type, name, created_at
                FROM qr_points
                ORDER BY created_at DESC, point_id DESC
                """
            )
            return [_row_to_point(r) for r in fetchall(cur)]

    def create(self, *, token: str, point_type: QRPointType, name: str) -> int:
        with unique_guard("QR token already registered"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO qr_points(token, point_type, name) VALUES(%s,%s,%s)",
                (token, point_type.value, name),
            )
            return int(cur.lastrowid)

    def delete(self, *, point_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM qr_points WHERE point_id=%s", (int(point_id),))
            return cur.rowcount > 0
