"""Error taxonomy shared by every layer.

Each member carries the HTTP status it renders as, a stable `kind`, and an
optional machine-readable `code` for the specific rule that failed.
"""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    status_code: int = 500
    kind: str = "Unexpected"
    default_message: str = "internal server error"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.code = code
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message


class ValidationFailedError(AppError):
    status_code = 400
    kind = "ValidationError"
    default_message = "invalid request"


class UnauthorizedError(AppError):
    status_code = 401
    kind = "Unauthorized"
    default_message = "invalid credentials"


class ForbiddenError(AppError):
    status_code = 403
    kind = "Forbidden"
    default_message = "access denied"


class NotFoundError(AppError):
    status_code = 404
    kind = "NotFound"
    default_message = "not found"


class ConflictError(AppError):
    status_code = 409
    kind = "Conflict"
    default_message = "conflict"


class UnexpectedError(AppError):
    """Internal detail stays in the logs; callers only see a generic message."""

    @property
    def public_message(self) -> str:
        return self.default_message


class StorageError(UnexpectedError):
    """Raised when the relational store fails or times out."""


class BookingConflictError(ConflictError):
    default_message = "slot is already filled"

    def __init__(self, message: Optional[str] = None, *, code: str = "slot_filled") -> None:
        super().__init__(message, code=code)


class DuplicateEmailError(ConflictError):
    default_message = "email is already registered"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, code="duplicate_email")


class SpaceInUseError(ConflictError):
    default_message = "space has existing reservations"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message, code="space_in_use")
