"""Signed bearer tokens carrying a caller's identity, role and expiry."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Optional

import jwt

from spacebook.domain.errors import UnauthorizedError
from spacebook.domain.models import Claims, Identity, Role, TokenPurpose
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger
from spacebook.utils.timeutils import from_epoch, to_epoch, utc_now


logger = get_logger(__name__)

_REQUIRED_CLAIMS = ["sub", "email", "role", "purpose", "iat", "exp"]


class SigningSecretNotConfiguredError(RuntimeError):
    """Raised at startup when JWT_SECRET is missing."""


class InvalidTokenError(UnauthorizedError):
    """Malformed, forged, expired or misused token; deliberately not more specific."""

    def __init__(self) -> None:
        super().__init__("invalid credentials", code="invalid_token")


class TokenCodec:
    """Issues and verifies HS256 identity assertions."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        if not self._settings.jwt_secret:
            raise SigningSecretNotConfiguredError(
                "JWT_SECRET is not configured. Set JWT_SECRET in environment variables."
            )
        if self._settings.token_ttl_hours <= 0:
            raise ValueError("TOKEN_TTL_HOURS must be > 0")
        self._secret = self._settings.jwt_secret
        self._algorithm = self._settings.jwt_algorithm
        self._ttl = timedelta(hours=self._settings.token_ttl_hours)
        self._clock = clock or utc_now

    def issue(self, identity: Identity, purpose: TokenPurpose = TokenPurpose.ACCESS) -> str:
        issued_at = self._clock()
        payload = {
            "sub": identity.subject_id,
            "email": identity.email,
            "role": identity.role.value,
            "purpose": purpose.value,
            "iat": to_epoch(issued_at),
            "exp": to_epoch(issued_at + self._ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str, purpose: TokenPurpose = TokenPurpose.ACCESS) -> Claims:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            logger.info("Rejected bearer token: %s", type(exc).__name__)
            raise InvalidTokenError() from exc

        try:
            role = Role(payload["role"])
            token_purpose = TokenPurpose(payload["purpose"])
            expires_at = from_epoch(int(payload["exp"]))
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            logger.info("Rejected bearer token with unreadable claims")
            raise InvalidTokenError() from exc

        # Expiry is judged against the codec clock, not the library wall clock.
        if expires_at <= self._clock():
            logger.info("Rejected expired bearer token for subject %s", payload["sub"])
            raise InvalidTokenError()

        if token_purpose is not purpose:
            logger.info("Rejected %s token used as %s", token_purpose.value, purpose.value)
            raise InvalidTokenError()

        return Claims(
            subject_id=str(payload["sub"]),
            email=str(payload["email"]),
            role=role,
            expires_at=expires_at,
            purpose=token_purpose,
        )
