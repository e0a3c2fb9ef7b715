from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from spacebook.domain.models import Claims, Role
from spacebook.repository.data_repository import DataRepository
from spacebook.services.authorization_service import (
    AccessForbiddenError,
    AuthorizationGuard,
    ScopeNotFoundError,
)
from spacebook.utils.config import get_settings


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _build_test_settings(tmp_path, filename: str):
    return replace(get_settings(), database_path=tmp_path / filename)


def _claims(subject_id: str, role: Role) -> Claims:
    return Claims(
        subject_id=subject_id,
        email=f"{subject_id}@acme.test",
        role=role,
        expires_at=NOW + timedelta(hours=1),
    )


def _build_guard(tmp_path) -> tuple[AuthorizationGuard, DataRepository]:
    settings = _build_test_settings(tmp_path, "guard.db")
    repository = DataRepository(settings)
    repository.initialize_database()
    return AuthorizationGuard(repository=repository, settings=settings), repository


def test_role_in_expected_set_is_permitted(tmp_path):
    guard, _ = _build_guard(tmp_path)
    claims = _claims("emp-1", Role.EMPLOYEE)

    assert guard.require_role(claims, Role.MANAGER, Role.EMPLOYEE) is claims


@pytest.mark.parametrize(
    ("role", "expected", "message"),
    [
        (Role.ADMINISTRATOR, (Role.MANAGER, Role.EMPLOYEE), "only employees have access"),
        (Role.EMPLOYEE, (Role.MANAGER,), "only managers have access"),
        (Role.MANAGER, (Role.ADMINISTRATOR,), "only administrators have access"),
        (Role.ADMINISTRATOR, (Role.EMPLOYEE,), "only employees have access"),
    ],
)
def test_roles_are_disjoint(tmp_path, role, expected, message):
    guard, _ = _build_guard(tmp_path)

    with pytest.raises(AccessForbiddenError) as exc_info:
        guard.require_role(_claims("someone", role), *expected)

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == message
    assert exc_info.value.code == "role_not_allowed"


def test_require_role_needs_at_least_one_role(tmp_path):
    guard, _ = _build_guard(tmp_path)

    with pytest.raises(ValueError):
        guard.require_role(_claims("emp-1", Role.EMPLOYEE))


def test_scope_resolves_callers_company(tmp_path):
    guard, repository = _build_guard(tmp_path)
    comp_id, manager_id = repository.create_company_with_manager(
        company_name="Acme",
        about=None,
        manager_name="Mia",
        manager_position="Lead",
        manager_email="mia@acme.test",
    )
    emp_id = repository.create_employee(comp_id, "Eli", "Engineer", "eli@acme.test")

    assert guard.scope_to_company(_claims(manager_id, Role.MANAGER)) == comp_id
    assert guard.scope_to_company(_claims(emp_id, Role.EMPLOYEE)) == comp_id


def test_administrator_has_no_company_scope(tmp_path):
    guard, _ = _build_guard(tmp_path)

    with pytest.raises(AccessForbiddenError) as exc_info:
        guard.scope_to_company(_claims("admin-1", Role.ADMINISTRATOR))

    assert exc_info.value.message == "this is for employees only"
    assert exc_info.value.code == "no_company_scope"


def test_administrator_denial_names_the_allowed_role(tmp_path):
    guard, _ = _build_guard(tmp_path)

    with pytest.raises(AccessForbiddenError) as exc_info:
        guard.scope_to_company(_claims("admin-1", Role.ADMINISTRATOR), Role.MANAGER)

    assert exc_info.value.message == "only managers have access"
    assert exc_info.value.code == "no_company_scope"


def test_manager_only_scope_rejects_employee(tmp_path):
    guard, repository = _build_guard(tmp_path)
    comp_id, _ = repository.create_company_with_manager(
        company_name="Acme",
        about=None,
        manager_name="Mia",
        manager_position="Lead",
        manager_email="mia@acme.test",
    )
    emp_id = repository.create_employee(comp_id, "Eli", "Engineer", "eli@acme.test")

    with pytest.raises(AccessForbiddenError):
        guard.scope_to_company(_claims(emp_id, Role.EMPLOYEE), Role.MANAGER)


def test_removed_subject_no_longer_resolves(tmp_path):
    guard, repository = _build_guard(tmp_path)
    comp_id, manager_id = repository.create_company_with_manager(
        company_name="Acme",
        about=None,
        manager_name="Mia",
        manager_position="Lead",
        manager_email="mia@acme.test",
    )
    repository.delete_company(comp_id)

    with pytest.raises(ScopeNotFoundError) as exc_info:
        guard.scope_to_company(_claims(manager_id, Role.MANAGER))

    assert exc_info.value.status_code == 404
    assert exc_info.value.code == "identity_not_found"
