"""
Timestamp helpers shared by the repository and the reservation engine.

Rules:
- Storage keeps instants as UTC epoch seconds (INTEGER columns).
- Calendar-day logic ("today", "booked windows today") uses the configured
  reference timezone via `zoneinfo`.
- Sub-second precision is dropped before anything is compared or stored.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo


UTC = timezone.utc


def utc_now() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def load_timezone(name: str) -> tzinfo:
    """Resolve an IANA name, failing loudly on typos at startup."""
    return ZoneInfo(name)


def to_epoch(value: datetime) -> int:
    if value.tzinfo is None:
        raise ValueError("timestamp must be timezone-aware")
    return int(value.timestamp())


def from_epoch(value: int) -> datetime:
    return datetime.fromtimestamp(int(value), tz=UTC)


def truncate_to_second(value: datetime) -> datetime:
    return value.replace(microsecond=0)


def day_bounds(day: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the half-open `[midnight, next midnight)` window of `day` in `tz`."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end
