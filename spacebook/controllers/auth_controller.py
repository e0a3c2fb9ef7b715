"""HTTP controller layer for login and account activation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from spacebook.controllers.dependencies import get_auth_service, require_activation_claims
from spacebook.controllers.envelope import Envelope, ok
from spacebook.domain.models import Claims
from spacebook.services.auth_service import AuthService


router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


class ActivateRequest(BaseModel):
    password: str = Field(min_length=1)


class ActivatedResponse(BaseModel):
    emp_id: str
    activated: bool


@router.post("/auth/admin/login", response_model=Envelope[TokenResponse])
def login_admin(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> dict:
    return ok(TokenResponse(token=service.login_admin(payload.email, payload.password)))


@router.post("/auth/login/employee", response_model=Envelope[TokenResponse])
def login_employee(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> dict:
    return ok(TokenResponse(token=service.login_employee(payload.email, payload.password)))


@router.patch(
    "/employees/{emp_id}/verify",
    response_model=Envelope[ActivatedResponse],
    status_code=status.HTTP_202_ACCEPTED,
)
def activate_employee(
    emp_id: str,
    payload: ActivateRequest,
    claims: Claims = Depends(require_activation_claims),
    service: AuthService = Depends(get_auth_service),
) -> dict:
    """Set the first password of an invited account; the bearer must be its activation token."""
    employee = service.activate_account(claims, emp_id, payload.password)
    return ok(ActivatedResponse(emp_id=employee.emp_id, activated=employee.activated))
