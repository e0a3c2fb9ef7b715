from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from spacebook.domain.models import Identity, Role, TokenPurpose
from spacebook.services.token_service import (
    InvalidTokenError,
    SigningSecretNotConfiguredError,
    TokenCodec,
)
from spacebook.utils.config import get_settings


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
SECRET = "unit-test-signing-secret-0123456789abcdef"


def _build_test_settings(secret: str | None = SECRET):
    return replace(get_settings(), jwt_secret=secret, token_ttl_hours=1)


def _codec(at: datetime = NOW, secret: str | None = SECRET) -> TokenCodec:
    return TokenCodec(settings=_build_test_settings(secret), clock=lambda: at)


def _identity(role: Role = Role.EMPLOYEE) -> Identity:
    return Identity(subject_id="emp-1", email="eli@acme.test", role=role)


def test_issue_then_verify_returns_identity_and_expiry():
    codec = _codec()

    claims = codec.verify(codec.issue(_identity(Role.MANAGER)))

    assert claims.subject_id == "emp-1"
    assert claims.email == "eli@acme.test"
    assert claims.role is Role.MANAGER
    assert claims.purpose is TokenPurpose.ACCESS
    assert claims.expires_at == NOW + timedelta(hours=1)


def test_missing_secret_fails_construction():
    with pytest.raises(SigningSecretNotConfiguredError):
        _codec(secret=None)


def test_non_positive_ttl_fails_construction():
    settings = replace(_build_test_settings(), token_ttl_hours=0)
    with pytest.raises(ValueError):
        TokenCodec(settings=settings)


def test_tampered_payload_is_rejected():
    codec = _codec()
    header, _, signature = codec.issue(_identity()).split(".")
    forged = jwt.encode(
        {
            "sub": "emp-1",
            "email": "eli@acme.test",
            "role": Role.ADMINISTRATOR.value,
            "purpose": "access",
            "iat": 0,
            "exp": 4102444800,
        },
        "attacker-chosen-secret-0123456789abcdef",
        algorithm="HS256",
    )
    forged_payload = forged.split(".")[1]

    with pytest.raises(InvalidTokenError):
        codec.verify(f"{header}.{forged_payload}.{signature}")


def test_token_signed_with_other_secret_is_rejected():
    token = _codec(secret="another-signing-secret-0123456789abcdef").issue(_identity())

    with pytest.raises(InvalidTokenError):
        _codec().verify(token)


def test_expired_token_is_rejected():
    token = _codec(at=NOW - timedelta(hours=2)).issue(_identity())

    with pytest.raises(InvalidTokenError):
        _codec().verify(token)


def test_token_is_rejected_at_its_exact_expiry():
    token = _codec(at=NOW - timedelta(hours=1)).issue(_identity())

    with pytest.raises(InvalidTokenError):
        _codec().verify(token)


def test_activation_token_is_not_an_access_token():
    codec = _codec()
    activation = codec.issue(_identity(), purpose=TokenPurpose.ACTIVATION)

    with pytest.raises(InvalidTokenError):
        codec.verify(activation)
    assert codec.verify(activation, purpose=TokenPurpose.ACTIVATION).purpose is TokenPurpose.ACTIVATION


def test_access_token_cannot_activate_an_account():
    codec = _codec()

    with pytest.raises(InvalidTokenError):
        codec.verify(codec.issue(_identity()), purpose=TokenPurpose.ACTIVATION)


@pytest.mark.parametrize(
    "payload",
    [
        {"sub": "emp-1", "email": "eli@acme.test", "role": "EMP", "iat": 0, "exp": 4102444800},
        {"sub": "emp-1", "email": "eli@acme.test", "role": "ROOT", "purpose": "access", "iat": 0, "exp": 4102444800},
        {"sub": "emp-1", "email": "eli@acme.test", "role": "EMP", "purpose": "refresh", "iat": 0, "exp": 4102444800},
    ],
)
def test_correctly_signed_but_malformed_claims_are_rejected(payload):
    token = jwt.encode(payload, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        _codec().verify(token)


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
def test_garbage_is_rejected_with_the_same_error(token):
    with pytest.raises(InvalidTokenError) as exc_info:
        _codec().verify(token)

    assert exc_info.value.status_code == 401
    assert exc_info.value.public_message == "invalid credentials"
