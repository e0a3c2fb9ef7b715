"""HTTP controller layer for spaces and their availability."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import AwareDatetime, BaseModel, Field

from spacebook.controllers.dependencies import (
    get_reservation_service,
    get_space_service,
    require_claims,
)
from spacebook.controllers.envelope import Envelope, MessageResponse, ok
from spacebook.domain.models import Claims, Space
from spacebook.services.booking_service import ReservationService
from spacebook.services.space_service import SpaceService


router = APIRouter(tags=["spaces"])


class CreateSpaceRequest(BaseModel):
    name: str = Field(min_length=1)
    size: int = Field(gt=0)
    description: Optional[str] = None


class UpdateSpaceRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    size: Optional[int] = Field(default=None, gt=0)
    description: Optional[str] = None


class SpaceIdResponse(BaseModel):
    space_id: str


class SpaceResponse(BaseModel):
    space_id: str
    name: str
    size: int
    description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, space: Space) -> "SpaceResponse":
        return cls(**vars(space))


class SpacePageResponse(BaseModel):
    page: int
    limit: int
    total: int
    items: list[SpaceResponse]


class BookedWindowResponse(BaseModel):
    start_time: datetime
    end_time: datetime


@router.post(
    "/spaces",
    response_model=Envelope[SpaceIdResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_space(
    payload: CreateSpaceRequest,
    claims: Claims = Depends(require_claims),
    service: SpaceService = Depends(get_space_service),
) -> dict:
    space_id = service.create_space(claims, payload.name, payload.size, payload.description)
    return ok(SpaceIdResponse(space_id=space_id))


@router.get("/spaces", response_model=Envelope[SpacePageResponse])
def list_spaces(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    name: Optional[str] = Query(default=None),
    size: Optional[int] = Query(default=None, gt=0),
    service: SpaceService = Depends(get_space_service),
) -> dict:
    result = service.list_spaces(page=page, limit=limit, name=name, size=size)
    return ok(
        SpacePageResponse(
            page=result.page,
            limit=result.limit,
            total=result.total,
            items=[SpaceResponse.from_domain(item) for item in result.items],
        )
    )


@router.get("/spaces/available", response_model=Envelope[list[SpaceResponse]])
def list_available_spaces(
    start: AwareDatetime = Query(...),
    end: AwareDatetime = Query(...),
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    """Spaces with no reservation overlapping the half-open window [start, end)."""
    spaces = service.list_available_spaces(start, end)
    return ok([SpaceResponse.from_domain(item) for item in spaces])


@router.get("/spaces/{space_id}/bookings", response_model=Envelope[list[BookedWindowResponse]])
def list_space_bookings_today(
    space_id: str,
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    windows = service.list_booked_windows_today(space_id)
    return ok(
        [BookedWindowResponse(start_time=item.start_time, end_time=item.end_time) for item in windows]
    )


@router.get("/spaces/{space_id}", response_model=Envelope[SpaceResponse])
def get_space(
    space_id: str,
    service: SpaceService = Depends(get_space_service),
) -> dict:
    return ok(SpaceResponse.from_domain(service.get_space(space_id)))


@router.patch("/spaces/{space_id}", response_model=Envelope[SpaceResponse])
def update_space(
    space_id: str,
    payload: UpdateSpaceRequest,
    claims: Claims = Depends(require_claims),
    service: SpaceService = Depends(get_space_service),
) -> dict:
    space = service.update_space(
        claims,
        space_id,
        name=payload.name,
        size=payload.size,
        description=payload.description,
    )
    return ok(SpaceResponse.from_domain(space))


@router.delete("/spaces/{space_id}", response_model=Envelope[MessageResponse])
def delete_space(
    space_id: str,
    claims: Claims = Depends(require_claims),
    service: SpaceService = Depends(get_space_service),
) -> dict:
    service.delete_space(claims, space_id)
    return ok(MessageResponse(message="space deleted"))
