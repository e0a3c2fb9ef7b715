"""Platform-owned spaces: administrators mutate, everyone reads."""

from __future__ import annotations

from typing import Optional

from spacebook.domain.errors import NotFoundError, ValidationFailedError
from spacebook.domain.models import Claims, PageResult, Role, Space
from spacebook.repository.data_repository import DataRepository
from spacebook.services.authorization_service import AuthorizationGuard
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger


logger = get_logger(__name__)


class SpaceValidationError(ValidationFailedError):
    """Raised when space attributes are out of policy."""


class SpaceNotFoundError(NotFoundError):
    default_message = "space not found"


def _validate_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise SpaceValidationError("name is required", code="name_required")
    return cleaned


def _validate_size(size: int) -> int:
    if size <= 0:
        raise SpaceValidationError("size must be a positive integer", code="size_invalid")
    return size


class SpaceService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        guard: Optional[AuthorizationGuard] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._guard = guard or AuthorizationGuard(repository=self._repository, settings=self._settings)

    def create_space(
        self,
        claims: Claims,
        name: str,
        size: int,
        description: Optional[str] = None,
    ) -> str:
        self._guard.require_role(claims, Role.ADMINISTRATOR, action="create space")
        space_id = self._repository.create_space(_validate_name(name), _validate_size(size), description)
        logger.info("Space %s created", space_id)
        return space_id

    def get_space(self, space_id: str) -> Space:
        space = self._repository.get_space(space_id)
        if space is None:
            raise SpaceNotFoundError()
        return space

    def list_spaces(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        name: Optional[str] = None,
        size: Optional[int] = None,
    ) -> PageResult[Space]:
        resolved_limit = limit or self._settings.page_default_limit
        if page < 1 or not 1 <= resolved_limit <= self._settings.page_max_limit:
            raise SpaceValidationError("page or limit out of range", code="page_invalid")
        return self._repository.list_spaces(page, resolved_limit, name=name, size=size)

    def update_space(
        self,
        claims: Claims,
        space_id: str,
        name: Optional[str] = None,
        size: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Space:
        self._guard.require_role(claims, Role.ADMINISTRATOR, action="update space")
        if name is None and size is None and description is None:
            raise SpaceValidationError("no parameters provided", code="no_fields")
        space = self._repository.update_space(
            space_id,
            name=_validate_name(name) if name is not None else None,
            size=_validate_size(size) if size is not None else None,
            description=description,
        )
        if space is None:
            raise SpaceNotFoundError()
        return space

    def delete_space(self, claims: Claims, space_id: str) -> None:
        """Reject deletion while reservations still reference the space."""
        self._guard.require_role(claims, Role.ADMINISTRATOR, action="delete space")
        if not self._repository.delete_space(space_id):
            raise SpaceNotFoundError()
        logger.info("Space %s deleted", space_id)
