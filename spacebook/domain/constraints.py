"""Domain-level validation rules for reservation windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

from spacebook.domain.errors import ValidationFailedError


class ReservationRuleViolation(ValidationFailedError):
    """A proposed or extended window breaks a reservation rule."""


@dataclass(frozen=True)
class ReservationPolicy:
    max_duration: timedelta
    timezone: tzinfo


def validate_reservation_policy(policy: ReservationPolicy) -> None:
    if policy.max_duration <= timedelta(0):
        raise ValueError("max_duration must be > 0")
    if policy.max_duration >= timedelta(days=1):
        raise ValueError("max_duration must be shorter than a day")


def windows_overlap(
    start_a: datetime,
    end_a: datetime,
    start_b: datetime,
    end_b: datetime,
) -> bool:
    """Half-open `[start, end)` overlap; touching boundaries do not overlap."""
    return start_a < end_b and start_b < end_a


def _describe(duration: timedelta) -> str:
    minutes = int(duration.total_seconds() // 60)
    if minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minutes"


def check_proposed_window(
    start: datetime,
    end: datetime,
    now: datetime,
    policy: ReservationPolicy,
) -> None:
    """Apply the create-time rules in order; the first failure wins."""
    if start >= end:
        raise ReservationRuleViolation(
            "invalid timings: start must be before end",
            code="window_not_ordered",
        )
    if end - start > policy.max_duration:
        raise ReservationRuleViolation(
            f"you can only book for max {_describe(policy.max_duration)}",
            code="window_too_long",
        )
    try:
        start_day = start.astimezone(policy.timezone).date()
    except OverflowError as exc:
        raise ReservationRuleViolation(
            "invalid time calculation",
            code="invalid_time_calculation",
        ) from exc
    if start_day != now.astimezone(policy.timezone).date():
        raise ReservationRuleViolation(
            "you can only book for today's date",
            code="not_today",
        )
    if start <= now:
        raise ReservationRuleViolation(
            "booking time must be in the future",
            code="start_not_in_future",
        )


def extended_end(
    start: datetime,
    end: datetime,
    extra: timedelta,
    policy: ReservationPolicy,
) -> datetime:
    """Return the new end of an extension, or raise if it breaks the cap."""
    if extra <= timedelta(0):
        raise ReservationRuleViolation(
            "extra time must be positive",
            code="extension_not_positive",
        )
    try:
        new_end = end + extra
    except OverflowError as exc:
        raise ReservationRuleViolation(
            "invalid time calculation",
            code="invalid_time_calculation",
        ) from exc
    if new_end - start > policy.max_duration:
        raise ReservationRuleViolation(
            f"you can only book for max {_describe(policy.max_duration)}",
            code="extension_too_long",
        )
    return new_end
