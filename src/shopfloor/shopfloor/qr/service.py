from __future__ import annotations

import logging
import secrets
from typing import Sequence

from ..common.validators import require_non_empty
from ..core.constants import QR_TOKEN_BYTES
from ..core.enums import QRPointType, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import QRPoint
from .repository import QRPointRepository

logger = logging.getLogger(__name__)


class QRPointRegistry:
    """Maps opaque scan tokens to semantic point types. Read-only to the ledgers."""

    def __init__(self, points: QRPointRepository):
        self._points = points

    def resolve(self, token: str) -> QRPoint:
        point = self._points.get_by_token((token or "").strip())
        if not point:
            raise NotFoundError("Unknown QR code")
        return point

    def list_points(self) -> Sequence[QRPoint]:
        return self._points.list_all()

    def register_point(self, *, current_role: Role, point_type: QRPointType, name: str) -> QRPoint:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can register QR points")

        name = require_non_empty(name, "name")
        token = secrets.token_hex(QR_TOKEN_BYTES)
        point_id = self._points.create(token=token, point_type=point_type, name=name)
        logger.info("QR point %s registered (%s, %s)", point_id, point_type.value, name)
        return QRPoint(point_id=point_id, token=token, point_type=point_type, name=name)

    def remove_point(self, *, current_role: Role, point_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can remove QR points")
        if not self._points.delete(point_id=int(point_id)):
            raise NotFoundError("QR point not found")
        logger.info("QR point %s removed", point_id)
