"""Login, account activation and administrator bootstrap."""

from __future__ import annotations

from typing import Optional

from spacebook.domain.errors import (
    ForbiddenError,
    UnauthorizedError,
    ValidationFailedError,
)
from spacebook.domain.models import Claims, Employee, Identity, Role, TokenPurpose
from spacebook.repository.data_repository import DataRepository
from spacebook.services.token_service import TokenCodec
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger
from spacebook.utils.security import hash_password, verify_password


logger = get_logger(__name__)


class AuthenticationError(UnauthorizedError):
    """Wrong email, wrong password or inactive account; never more specific."""

    def __init__(self) -> None:
        super().__init__("invalid credentials", code="invalid_credentials")


class ActivationNotAllowedError(UnauthorizedError):
    def __init__(self) -> None:
        super().__init__("do not have access", code="activation_not_allowed")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _require_credentials(email: str, password: str) -> str:
    normalized = normalize_email(email)
    if not normalized:
        raise ValidationFailedError("email is required", code="email_required")
    if not password.strip():
        raise ValidationFailedError("password is required", code="password_required")
    return normalized


class AuthService:
    """Validates login credentials and hands out signed tokens."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        token_codec: Optional[TokenCodec] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._token_codec = token_codec or TokenCodec(settings=self._settings)

    def bootstrap_admin(self) -> bool:
        """Seed the configured administrator once; returns True if one was created."""
        email = self._settings.admin_email
        password = self._settings.admin_password
        if not email or not password:
            logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin bootstrap")
            return False
        normalized = normalize_email(email)
        if self._repository.get_admin_by_email(normalized) is not None:
            logger.info("Administrator %s already present", normalized)
            return False
        self._repository.create_admin(
            normalized,
            hash_password(password, self._settings.password_hash_iterations),
        )
        logger.info("Administrator %s bootstrapped", normalized)
        return True

    def login_admin(self, email: str, password: str) -> str:
        normalized = _require_credentials(email, password)
        admin = self._repository.get_admin_by_email(normalized)
        if admin is None or not verify_password(password, admin.password_hash):
            logger.warning("Failed administrator login for %s", normalized)
            raise AuthenticationError()
        return self._token_codec.issue(
            Identity(subject_id=admin.admin_id, email=admin.email, role=Role.ADMINISTRATOR)
        )

    def login_employee(self, email: str, password: str) -> str:
        normalized = _require_credentials(email, password)
        employee = self._repository.get_employee_by_email(normalized)
        if (
            employee is None
            or employee.password_hash is None
            or not verify_password(password, employee.password_hash)
        ):
            logger.warning("Failed employee login for %s", normalized)
            raise AuthenticationError()
        return self._token_codec.issue(
            Identity(subject_id=employee.emp_id, email=employee.email, role=employee.role)
        )

    def issue_activation_token(self, employee_id: str, email: str, role: Role) -> str:
        return self._token_codec.issue(
            Identity(subject_id=employee_id, email=email, role=role),
            purpose=TokenPurpose.ACTIVATION,
        )

    def activate_account(self, claims: Claims, employee_id: str, password: str) -> Employee:
        """Set an invited account's first password using its activation token."""
        if claims.purpose is not TokenPurpose.ACTIVATION or claims.subject_id != employee_id:
            logger.warning("Activation of %s denied for subject %s", employee_id, claims.subject_id)
            raise ForbiddenError("activation token does not match this account", code="activation_mismatch")
        if not password.strip():
            raise ValidationFailedError("password is required", code="password_required")
        activated = self._repository.activate_employee(
            employee_id,
            hash_password(password, self._settings.password_hash_iterations),
        )
        if not activated:
            raise ActivationNotAllowedError()
        employee = self._repository.get_employee(employee_id)
        if employee is None:
            raise ActivationNotAllowedError()
        logger.info("Employee %s activated", employee_id)
        return employee
