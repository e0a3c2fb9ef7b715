"""HTTP controller layer for reservations and the company usage report."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import AwareDatetime, BaseModel, Field

from spacebook.controllers.dependencies import (
    get_reservation_service,
    get_usage_service,
    require_claims,
)
from spacebook.controllers.envelope import Envelope, MessageResponse, ok
from spacebook.domain.models import Claims, CompanyReservation, Reservation, UsageSummary
from spacebook.services.booking_service import ReservationService
from spacebook.services.usage_service import UsageReportService


router = APIRouter(tags=["bookings"])


class CreateBookingRequest(BaseModel):
    """Both instants must carry an explicit offset; naive values are rejected."""

    space_id: str = Field(min_length=1)
    start_time: AwareDatetime
    end_time: AwareDatetime


class ExtendBookingRequest(BaseModel):
    extra_time: timedelta


class BookingIdResponse(BaseModel):
    booking_id: str


class BookingResponse(BaseModel):
    booking_id: str
    space_id: str
    booked_by: str
    start_time: datetime
    end_time: datetime
    created_at: datetime

    @classmethod
    def from_domain(cls, reservation: Reservation) -> "BookingResponse":
        return cls(
            booking_id=reservation.booking_id,
            space_id=reservation.space_id,
            booked_by=reservation.holder_id,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
            created_at=reservation.created_at,
        )


class CompanyBookingResponse(BaseModel):
    booking_id: str
    space_id: str
    emp_id: str
    employee_name: str
    email: str
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_domain(cls, reservation: CompanyReservation) -> "CompanyBookingResponse":
        return cls(
            booking_id=reservation.booking_id,
            space_id=reservation.space_id,
            emp_id=reservation.holder_id,
            employee_name=reservation.employee_name,
            email=reservation.email,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
        )


class SpaceUsageResponse(BaseModel):
    space_id: str
    booking_count: int = Field(ge=0)
    booked_minutes: float = Field(ge=0.0)


class EmployeeUsageResponse(BaseModel):
    emp_id: str
    employee_name: str
    booking_count: int = Field(ge=0)
    booked_minutes: float = Field(ge=0.0)


class UsageSummaryResponse(BaseModel):
    comp_id: str
    total_bookings: int = Field(ge=0)
    total_booked_minutes: float = Field(ge=0.0)
    by_space: list[SpaceUsageResponse]
    by_employee: list[EmployeeUsageResponse]

    @classmethod
    def from_domain(cls, summary: UsageSummary) -> "UsageSummaryResponse":
        return cls(
            comp_id=summary.comp_id,
            total_bookings=summary.total_bookings,
            total_booked_minutes=summary.total_booked_minutes,
            by_space=[SpaceUsageResponse(**vars(item)) for item in summary.by_space],
            by_employee=[EmployeeUsageResponse(**vars(item)) for item in summary.by_employee],
        )


# Fixed paths are registered ahead of /bookings/{booking_id}.


@router.get("/bookings/me", response_model=Envelope[list[BookingResponse]])
def list_my_bookings(
    claims: Claims = Depends(require_claims),
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    reservations = service.list_my_reservations(claims)
    return ok([BookingResponse.from_domain(item) for item in reservations])


@router.get("/bookings/company", response_model=Envelope[list[CompanyBookingResponse]])
def list_company_bookings(
    claims: Claims = Depends(require_claims),
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    reservations = service.list_company_reservations(claims)
    return ok([CompanyBookingResponse.from_domain(item) for item in reservations])


@router.get("/bookings/company/usage", response_model=Envelope[UsageSummaryResponse])
def company_usage(
    on: Optional[date] = Query(default=None),
    claims: Claims = Depends(require_claims),
    service: UsageReportService = Depends(get_usage_service),
) -> dict:
    """Totals per space and per employee, optionally limited to one local day."""
    return ok(UsageSummaryResponse.from_domain(service.company_usage(claims, on=on)))


@router.post(
    "/bookings",
    response_model=Envelope[BookingIdResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_booking(
    payload: CreateBookingRequest,
    claims: Claims = Depends(require_claims),
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    booking_id = service.create_reservation(
        claims,
        space_id=payload.space_id,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    return ok(BookingIdResponse(booking_id=booking_id))


@router.get("/bookings/{booking_id}", response_model=Envelope[BookingResponse])
def get_booking(
    booking_id: str,
    claims: Claims = Depends(require_claims),
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    return ok(BookingResponse.from_domain(service.get_reservation(claims, booking_id)))


@router.patch("/bookings/{booking_id}", response_model=Envelope[BookingResponse])
def extend_booking(
    booking_id: str,
    payload: ExtendBookingRequest,
    claims: Claims = Depends(require_claims),
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    reservation = service.extend_reservation(claims, booking_id, payload.extra_time)
    return ok(BookingResponse.from_domain(reservation))


@router.delete("/bookings/{booking_id}", response_model=Envelope[MessageResponse])
def cancel_booking(
    booking_id: str,
    claims: Claims = Depends(require_claims),
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    service.cancel_reservation(claims, booking_id)
    return ok(MessageResponse(message="booking cancelled"))
