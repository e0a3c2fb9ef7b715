"""Role and company-scope checks run before any reservation data is touched."""

from __future__ import annotations

from typing import Optional

from spacebook.domain.errors import ForbiddenError, NotFoundError
from spacebook.domain.models import Claims, Role
from spacebook.repository.data_repository import DataRepository
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger


logger = get_logger(__name__)

_DENIAL_MESSAGES = {
    frozenset({Role.ADMINISTRATOR}): "only administrators have access",
    frozenset({Role.MANAGER}): "only managers have access",
    frozenset({Role.EMPLOYEE}): "only employees have access",
    frozenset({Role.MANAGER, Role.EMPLOYEE}): "only employees have access",
}


class AccessForbiddenError(ForbiddenError):
    """Caller's role is not allowed to perform the action."""


class ScopeNotFoundError(NotFoundError):
    """Caller's identity no longer resolves to a directory entry."""


class AuthorizationGuard:
    """Maps (role, action, scope) to permit or deny.

    Roles are compared by set membership only. An administrator token never
    satisfies a manager or employee check.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def require_role(self, claims: Claims, *expected: Role, action: str = "request") -> Claims:
        if not expected:
            raise ValueError("require_role needs at least one role")
        if claims.role in expected:
            return claims
        logger.warning(
            "Denied %s for subject %s with role %s",
            action,
            claims.subject_id,
            claims.role.value,
        )
        message = _DENIAL_MESSAGES.get(frozenset(expected), "access denied")
        raise AccessForbiddenError(message, code="role_not_allowed")

    def scope_to_company(
        self,
        claims: Claims,
        *allowed: Role,
        action: str = "request",
    ) -> str:
        """Resolve the caller's company; administrators have none.

        `allowed` narrows the directory roles that may proceed (both by
        default), so a manager-only scoped read is still a single check.
        """
        if claims.role is Role.ADMINISTRATOR:
            logger.warning("Denied %s for administrator %s: no company scope", action, claims.subject_id)
            message = "this is for employees only"
            if allowed:
                message = _DENIAL_MESSAGES.get(frozenset(allowed), message)
            raise AccessForbiddenError(message, code="no_company_scope")
        self.require_role(claims, *(allowed or (Role.MANAGER, Role.EMPLOYEE)), action=action)
        comp_id = self._repository.get_employee_company_id(claims.subject_id)
        if comp_id is None:
            logger.warning("Subject %s no longer resolves to an employee", claims.subject_id)
            raise ScopeNotFoundError("employee not found", code="identity_not_found")
        return comp_id
