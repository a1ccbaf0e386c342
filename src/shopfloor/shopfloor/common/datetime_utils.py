from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

Clock = Callable[[], datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; a bare date means local midnight."""
    if not value:
        return None
    v = value.strip()
    if len(v) == 10:
        return datetime.combine(parse_iso_date(v), time.min)
    return datetime.fromisoformat(v)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so services can take an injectable clock and tests can pin it.
    """
    return datetime.now()


def dates_window(start: date, end: date) -> tuple[datetime, datetime]:
    """Half-open datetime window covering calendar days start..end inclusive."""
    return datetime.combine(start, time.min), datetime.combine(end, time.min) + timedelta(days=1)


def hours(delta: timedelta) -> float:
    return delta.total_seconds() / 3600.0


def minutes_between(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def isoformat_or_none(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
