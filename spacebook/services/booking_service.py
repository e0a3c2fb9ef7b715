"""Reservation lifecycle: validate, detect overlaps, commit or reject."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from spacebook.domain.constraints import (
    ReservationPolicy,
    ReservationRuleViolation,
    check_proposed_window,
    extended_end,
    validate_reservation_policy,
)
from spacebook.domain.errors import BookingConflictError, NotFoundError
from spacebook.domain.models import (
    BookedWindow,
    Claims,
    CompanyReservation,
    Reservation,
    Role,
    Space,
)
from spacebook.repository.data_repository import DataRepository
from spacebook.services.authorization_service import AuthorizationGuard, ScopeNotFoundError
from spacebook.services.space_service import SpaceNotFoundError
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger
from spacebook.utils.timeutils import (
    UTC,
    day_bounds,
    load_timezone,
    truncate_to_second,
    utc_now,
)


logger = get_logger(__name__)

BOOKING_ROLES = (Role.MANAGER, Role.EMPLOYEE)

EXTENSION_CONFLICT_CODE = "extension_conflict"
EXTENSION_CONFLICT_MESSAGE = "the requested extension conflicts with an existing reservation"


class BookingNotFoundError(NotFoundError):
    """Reservation is absent or held by someone else; the two are not distinguished."""

    default_message = "booking not found"


def _normalize_instant(value: datetime, field_name: str) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ReservationRuleViolation(
            f"{field_name} must include a timezone offset",
            code="naive_timestamp",
        )
    try:
        return truncate_to_second(value.astimezone(UTC))
    except OverflowError as exc:
        raise ReservationRuleViolation(
            "invalid time calculation",
            code="invalid_time_calculation",
        ) from exc


class ReservationService:
    """Create, extend, cancel and query reservations.

    Create and extend run their overlap check and their write inside one
    `BEGIN IMMEDIATE` transaction. The store's overlap triggers back this up,
    and a trigger rejection surfaces as the same conflict as the pre-check.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        guard: Optional[AuthorizationGuard] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._guard = guard or AuthorizationGuard(
            repository=self._repository,
            settings=self._settings,
        )
        self._policy = ReservationPolicy(
            max_duration=timedelta(minutes=self._settings.booking_max_duration_minutes),
            timezone=load_timezone(self._settings.booking_timezone),
        )
        validate_reservation_policy(self._policy)
        self._clock = clock or utc_now

    @property
    def policy(self) -> ReservationPolicy:
        return self._policy

    def _now(self) -> datetime:
        return truncate_to_second(self._clock().astimezone(UTC))

    def create_reservation(
        self,
        claims: Claims,
        space_id: str,
        start_time: datetime,
        end_time: datetime,
    ) -> str:
        self._guard.require_role(claims, *BOOKING_ROLES, action="create booking")

        start = _normalize_instant(start_time, "start_time")
        end = _normalize_instant(end_time, "end_time")
        check_proposed_window(start, end, self._now(), self._policy)

        with self._repository.transaction("create booking") as conn:
            if not self._repository.space_exists(conn, space_id):
                raise SpaceNotFoundError()
            if not self._repository.employee_exists(conn, claims.subject_id):
                raise ScopeNotFoundError("employee not found", code="identity_not_found")
            if self._repository.has_overlapping_reservation(conn, space_id, start, end):
                logger.info("Booking conflict on space %s for [%s, %s)", space_id, start, end)
                raise BookingConflictError()
            booking_id = self._repository.insert_reservation(
                conn,
                space_id,
                claims.subject_id,
                start,
                end,
            )

        logger.info("Booking %s created on space %s by %s", booking_id, space_id, claims.subject_id)
        return booking_id

    def extend_reservation(
        self,
        claims: Claims,
        booking_id: str,
        extra_time: timedelta,
    ) -> Reservation:
        self._guard.require_role(claims, *BOOKING_ROLES, action="extend booking")

        try:
            with self._repository.transaction("extend booking") as conn:
                reservation = self._repository.fetch_holder_reservation(
                    conn,
                    booking_id,
                    claims.subject_id,
                )
                if reservation is None:
                    logger.warning(
                        "Booking not found for extension: %s by user: %s",
                        booking_id,
                        claims.subject_id,
                    )
                    raise BookingNotFoundError()

                new_end = truncate_to_second(
                    extended_end(
                        reservation.start_time,
                        reservation.end_time,
                        extra_time,
                        self._policy,
                    )
                )
                if self._repository.has_overlapping_reservation(
                    conn,
                    reservation.space_id,
                    reservation.start_time,
                    new_end,
                    exclude_booking_id=booking_id,
                ):
                    raise BookingConflictError(
                        EXTENSION_CONFLICT_MESSAGE,
                        code=EXTENSION_CONFLICT_CODE,
                    )
                self._repository.update_reservation_end(conn, booking_id, new_end)
        except BookingConflictError as exc:
            if exc.code == EXTENSION_CONFLICT_CODE:
                raise
            raise BookingConflictError(
                EXTENSION_CONFLICT_MESSAGE,
                code=EXTENSION_CONFLICT_CODE,
            ) from exc

        logger.info("Booking %s extended to %s", booking_id, new_end)
        return replace(reservation, end_time=new_end)

    def cancel_reservation(self, claims: Claims, booking_id: str) -> None:
        self._guard.require_role(claims, *BOOKING_ROLES, action="cancel booking")
        if not self._repository.delete_reservation(booking_id, claims.subject_id):
            raise BookingNotFoundError()
        logger.info("Booking %s cancelled by %s", booking_id, claims.subject_id)

    def list_my_reservations(self, claims: Claims) -> list[Reservation]:
        self._guard.require_role(claims, *BOOKING_ROLES, action="list own bookings")
        return self._repository.list_holder_reservations(claims.subject_id)

    def get_reservation(self, claims: Claims, booking_id: str) -> Reservation:
        self._guard.require_role(claims, *BOOKING_ROLES, action="get booking")
        reservation = self._repository.get_holder_reservation(booking_id, claims.subject_id)
        if reservation is None:
            raise BookingNotFoundError()
        return reservation

    def list_company_reservations(self, claims: Claims) -> list[CompanyReservation]:
        comp_id = self._guard.scope_to_company(claims, Role.MANAGER, action="list company bookings")
        return self._repository.list_company_reservations(comp_id)

    def list_available_spaces(self, start_time: datetime, end_time: datetime) -> list[Space]:
        start = _normalize_instant(start_time, "start")
        end = _normalize_instant(end_time, "end")
        if start >= end:
            raise ReservationRuleViolation(
                "invalid timings: start must be before end",
                code="window_not_ordered",
            )
        return self._repository.list_available_spaces(start, end)

    def list_booked_windows_today(self, space_id: str) -> list[BookedWindow]:
        today = self._now().astimezone(self._policy.timezone).date()
        day_start, day_end = day_bounds(today, self._policy.timezone)
        return self._repository.list_space_windows(space_id, day_start, day_end)
