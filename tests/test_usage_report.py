from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

import pytest

from spacebook.domain.models import Claims, Role
from spacebook.repository.data_repository import DataRepository
from spacebook.services.authorization_service import AccessForbiddenError
from spacebook.services.booking_service import ReservationService
from spacebook.services.usage_service import UsageReportService
from spacebook.utils.config import get_settings


UTC = timezone.utc
NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute, tzinfo=UTC)


def _claims(subject_id: str, role: Role = Role.EMPLOYEE) -> Claims:
    return Claims(
        subject_id=subject_id,
        email=f"{subject_id}@acme.test",
        role=role,
        expires_at=NOW + timedelta(hours=1),
    )


def _build_report(tmp_path):
    settings = replace(
        get_settings(),
        database_path=tmp_path / "usage.db",
        booking_timezone="UTC",
    )
    repository = DataRepository(settings)
    repository.initialize_database()

    comp_id, manager_id = repository.create_company_with_manager(
        company_name="Acme",
        about=None,
        manager_name="Mia",
        manager_position="Lead",
        manager_email="mia@acme.test",
    )
    employee_id = repository.create_employee(comp_id, "Eli", "Engineer", "eli@acme.test")
    other_comp, other_manager = repository.create_company_with_manager(
        company_name="Globex",
        about=None,
        manager_name="Otto",
        manager_position="Lead",
        manager_email="otto@globex.test",
    )
    orion = repository.create_space("Orion", 6, None)
    vega = repository.create_space("Vega", 4, None)

    bookings = ReservationService(repository=repository, settings=settings, clock=lambda: NOW)
    bookings.create_reservation(_claims(manager_id, Role.MANAGER), orion, at(10), at(12))
    bookings.create_reservation(_claims(employee_id), orion, at(13), at(13, 30))
    bookings.create_reservation(_claims(employee_id), vega, at(10), at(11))
    bookings.create_reservation(_claims(other_manager, Role.MANAGER), vega, at(14), at(15))

    report = UsageReportService(repository=repository, settings=settings)
    ids = {
        "comp_id": comp_id,
        "manager": manager_id,
        "employee": employee_id,
        "other_comp": other_comp,
        "other_manager": other_manager,
        "orion": orion,
        "vega": vega,
    }
    return report, ids


def test_usage_summary_aggregates_own_company_only(tmp_path):
    report, ids = _build_report(tmp_path)

    summary = report.company_usage(_claims(ids["manager"], Role.MANAGER))

    assert summary.comp_id == ids["comp_id"]
    assert summary.total_bookings == 3
    assert summary.total_booked_minutes == pytest.approx(210.0)
    assert [(item.space_id, item.booking_count, item.booked_minutes) for item in summary.by_space] == [
        (ids["orion"], 2, 150.0),
        (ids["vega"], 1, 60.0),
    ]
    assert [(item.employee_name, item.booking_count, item.booked_minutes) for item in summary.by_employee] == [
        ("Mia", 1, 120.0),
        ("Eli", 2, 90.0),
    ]


def test_usage_summary_for_other_company(tmp_path):
    report, ids = _build_report(tmp_path)

    summary = report.company_usage(_claims(ids["other_manager"], Role.MANAGER))

    assert summary.total_bookings == 1
    assert [item.space_id for item in summary.by_space] == [ids["vega"]]


def test_usage_summary_filtered_by_day(tmp_path):
    report, ids = _build_report(tmp_path)
    manager = _claims(ids["manager"], Role.MANAGER)

    assert report.company_usage(manager, on=date(2026, 3, 2)).total_bookings == 3

    empty = report.company_usage(manager, on=date(2026, 3, 3))
    assert empty.total_bookings == 0
    assert empty.total_booked_minutes == 0.0
    assert empty.by_space == []
    assert empty.by_employee == []


@pytest.mark.parametrize("role", [Role.EMPLOYEE, Role.ADMINISTRATOR])
def test_usage_summary_is_manager_only(tmp_path, role):
    report, ids = _build_report(tmp_path)
    subject = ids["employee"] if role is Role.EMPLOYEE else "admin-1"

    with pytest.raises(AccessForbiddenError):
        report.company_usage(_claims(subject, role))
