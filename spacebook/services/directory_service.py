"""Company and employee directory, scoped by the caller's role and company."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from spacebook.domain.errors import NotFoundError, ValidationFailedError
from spacebook.domain.models import Claims, Company, Employee, PageResult, Role
from spacebook.repository.data_repository import DataRepository
from spacebook.services.auth_service import AuthService, normalize_email
from spacebook.services.authorization_service import AuthorizationGuard
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger


logger = get_logger(__name__)


class CompanyNotFoundError(NotFoundError):
    default_message = "company not found"


class EmployeeNotFoundError(NotFoundError):
    default_message = "employee not found"


@dataclass(frozen=True)
class EmployeeInvite:
    name: str
    position: str
    email: str


@dataclass(frozen=True)
class CreatedCompany:
    comp_id: str
    manager_id: str
    activation_token: str


@dataclass(frozen=True)
class CreatedEmployee:
    emp_id: str
    activation_token: str


def _required_text(value: str, field_name: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValidationFailedError(f"{field_name} is required", code=f"{field_name}_required")
    return cleaned


def _optional_text(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None:
        return None
    return _required_text(value, field_name)


def _clean_invite(invite: EmployeeInvite) -> EmployeeInvite:
    email = normalize_email(invite.email)
    if "@" not in email:
        raise ValidationFailedError("email is invalid", code="email_invalid")
    return EmployeeInvite(
        name=_required_text(invite.name, "name"),
        position=_required_text(invite.position, "position"),
        email=email,
    )


class DirectoryService:
    """Administrators manage companies; managers manage their own employees."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        guard: Optional[AuthorizationGuard] = None,
        auth_service: Optional[AuthService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._guard = guard or AuthorizationGuard(repository=self._repository, settings=self._settings)
        self._auth_service = auth_service or AuthService(
            repository=self._repository,
            settings=self._settings,
        )

    def _page_bounds(self, page: int, limit: Optional[int]) -> tuple[int, int]:
        resolved_limit = limit or self._settings.page_default_limit
        if page < 1:
            raise ValidationFailedError("page must be >= 1", code="page_invalid")
        if not 1 <= resolved_limit <= self._settings.page_max_limit:
            raise ValidationFailedError(
                f"limit must be between 1 and {self._settings.page_max_limit}",
                code="limit_invalid",
            )
        return page, resolved_limit

    # --- Companies ---

    def create_company(
        self,
        claims: Claims,
        company_name: str,
        about: Optional[str],
        manager: EmployeeInvite,
    ) -> CreatedCompany:
        self._guard.require_role(claims, Role.ADMINISTRATOR, action="create company")
        name = _required_text(company_name, "company_name")
        invite = _clean_invite(manager)
        comp_id, manager_id = self._repository.create_company_with_manager(
            company_name=name,
            about=about,
            manager_name=invite.name,
            manager_position=invite.position,
            manager_email=invite.email,
        )
        token = self._auth_service.issue_activation_token(manager_id, invite.email, Role.MANAGER)
        logger.info("Company %s created with manager %s", comp_id, manager_id)
        return CreatedCompany(comp_id=comp_id, manager_id=manager_id, activation_token=token)

    def get_company(self, claims: Claims, comp_id: str) -> Company:
        self._guard.require_role(claims, Role.ADMINISTRATOR, action="get company")
        company = self._repository.get_company(comp_id)
        if company is None:
            raise CompanyNotFoundError()
        return company

    def list_companies(
        self,
        claims: Claims,
        page: int = 1,
        limit: Optional[int] = None,
        company_name: Optional[str] = None,
    ) -> PageResult[Company]:
        self._guard.require_role(claims, Role.ADMINISTRATOR, action="list companies")
        page, limit = self._page_bounds(page, limit)
        return self._repository.list_companies(page, limit, company_name)

    def update_company(
        self,
        claims: Claims,
        comp_id: str,
        company_name: Optional[str] = None,
        about: Optional[str] = None,
    ) -> Company:
        self._guard.require_role(claims, Role.ADMINISTRATOR, action="update company")
        name = _optional_text(company_name, "company_name")
        if name is None and about is None:
            raise ValidationFailedError("no parameters provided", code="no_fields")
        company = self._repository.update_company(comp_id, company_name=name, about=about)
        if company is None:
            raise CompanyNotFoundError()
        return company

    def delete_company(self, claims: Claims, comp_id: str) -> None:
        self._guard.require_role(claims, Role.ADMINISTRATOR, action="delete company")
        if not self._repository.delete_company(comp_id):
            raise CompanyNotFoundError()
        logger.info("Company %s deleted with its employees and bookings", comp_id)

    def get_my_company(self, claims: Claims) -> Company:
        comp_id = self._guard.scope_to_company(claims, action="get own company")
        company = self._repository.get_company(comp_id)
        if company is None:
            raise CompanyNotFoundError("Company not found for this employee")
        return company

    # --- Employees ---

    def create_employee(self, claims: Claims, invite: EmployeeInvite) -> CreatedEmployee:
        comp_id = self._guard.scope_to_company(claims, Role.MANAGER, action="create employee")
        cleaned = _clean_invite(invite)
        emp_id = self._repository.create_employee(
            comp_id=comp_id,
            name=cleaned.name,
            position=cleaned.position,
            email=cleaned.email,
            role=Role.EMPLOYEE,
        )
        token = self._auth_service.issue_activation_token(emp_id, cleaned.email, Role.EMPLOYEE)
        logger.info("Employee %s invited to company %s", emp_id, comp_id)
        return CreatedEmployee(emp_id=emp_id, activation_token=token)

    def get_employee(self, claims: Claims, emp_id: str) -> Employee:
        comp_id = self._guard.scope_to_company(claims, Role.MANAGER, action="get employee")
        employee = self._repository.get_company_employee(comp_id, emp_id)
        if employee is None:
            raise EmployeeNotFoundError()
        return employee

    def list_employees(
        self,
        claims: Claims,
        page: int = 1,
        limit: Optional[int] = None,
        name: Optional[str] = None,
        position: Optional[str] = None,
    ) -> PageResult[Employee]:
        comp_id = self._guard.scope_to_company(claims, Role.MANAGER, action="list employees")
        page, limit = self._page_bounds(page, limit)
        return self._repository.list_employees(comp_id, page, limit, name=name, position=position)

    def update_employee(
        self,
        claims: Claims,
        emp_id: str,
        name: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Employee:
        comp_id = self._guard.scope_to_company(claims, Role.MANAGER, action="update employee")
        cleaned_name = _optional_text(name, "name")
        cleaned_position = _optional_text(position, "position")
        if cleaned_name is None and cleaned_position is None:
            raise ValidationFailedError("no parameters provided", code="no_fields")
        employee = self._repository.update_employee(
            comp_id,
            emp_id,
            name=cleaned_name,
            position=cleaned_position,
        )
        if employee is None:
            raise EmployeeNotFoundError()
        return employee

    def delete_employee(self, claims: Claims, emp_id: str) -> None:
        comp_id = self._guard.scope_to_company(claims, Role.MANAGER, action="delete employee")
        if emp_id == claims.subject_id:
            raise ValidationFailedError("managers cannot delete themselves", code="self_delete")
        if not self._repository.delete_employee(comp_id, emp_id):
            raise EmployeeNotFoundError()
        logger.info("Employee %s removed from company %s", emp_id, comp_id)
