from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import QRPointType
from .model import QRPoint


class QRPointRepository(Protocol):
    def get_by_token(self, token: str) -> Optional[QRPoint]:
        raise NotImplementedError

    def list_all(self) -> Sequence[QRPoint]:
        raise NotImplementedError

    def create(self, *, token: str, point_type: QRPointType, name: str) -> int:
        raise NotImplementedError

    def delete(self, *, point_id: int) -> bool:
        raise NotImplementedError
