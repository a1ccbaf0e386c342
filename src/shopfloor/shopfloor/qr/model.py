from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import QRPointType


@dataclass(frozen=True)
class QRPoint:
    """A physical location tagged with a scannable token."""

    point_id: int
    token: str
    point_type: QRPointType
    name: str
    created_at: Optional[datetime] = None
