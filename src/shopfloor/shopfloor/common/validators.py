from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_non_negative(value: int, field_name: str) -> int:
    if value is None or int(value) < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return int(value)


def require_not_before(at: datetime, reference: Optional[datetime], what: str) -> datetime:
    """Reject clock skew: ``at`` earlier than the referenced state's last timestamp."""
    if reference is not None and at < reference:
        raise ValidationError(f"{at.isoformat()} is earlier than {what} ({reference.isoformat()})")
    return at
