"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from spacebook.domain.errors import UnauthorizedError
from spacebook.domain.models import Claims, TokenPurpose
from spacebook.services.auth_service import AuthService
from spacebook.services.booking_service import ReservationService
from spacebook.services.directory_service import DirectoryService
from spacebook.services.space_service import SpaceService
from spacebook.services.token_service import TokenCodec
from spacebook.services.usage_service import UsageReportService


bearer_scheme = HTTPBearer(auto_error=False)


def _from_state(request: Request, attribute: str, label: str) -> Any:
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_token_codec(request: Request) -> TokenCodec:
    return _from_state(request, "token_codec", "Token codec")


def get_auth_service(request: Request) -> AuthService:
    return _from_state(request, "auth_service", "Auth service")


def get_reservation_service(request: Request) -> ReservationService:
    return _from_state(request, "reservation_service", "Reservation service")


def get_directory_service(request: Request) -> DirectoryService:
    return _from_state(request, "directory_service", "Directory service")


def get_space_service(request: Request) -> SpaceService:
    return _from_state(request, "space_service", "Space service")


def get_usage_service(request: Request) -> UsageReportService:
    return _from_state(request, "usage_service", "Usage report service")


def _verify(
    credentials: HTTPAuthorizationCredentials | None,
    token_codec: TokenCodec,
    purpose: TokenPurpose,
) -> Claims:
    if credentials is None:
        raise UnauthorizedError(
            "Authorization header with Bearer token is required",
            code="missing_token",
        )
    return token_codec.verify(credentials.credentials, purpose=purpose)


async def require_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    token_codec: TokenCodec = Depends(get_token_codec),
) -> Claims:
    return _verify(credentials, token_codec, TokenPurpose.ACCESS)


async def require_activation_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    token_codec: TokenCodec = Depends(get_token_codec),
) -> Claims:
    return _verify(credentials, token_codec, TokenPurpose.ACTIVATION)
