"""Aggregate reservation usage for a manager's company."""

from __future__ import annotations

from datetime import date
from typing import Optional

import pandas as pd

from spacebook.domain.constraints import windows_overlap
from spacebook.domain.models import (
    Claims,
    CompanyReservation,
    EmployeeUsage,
    Role,
    SpaceUsage,
    UsageSummary,
)
from spacebook.repository.data_repository import DataRepository
from spacebook.services.authorization_service import AuthorizationGuard
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger
from spacebook.utils.timeutils import day_bounds, load_timezone


logger = get_logger(__name__)


def _build_usage_frame(reservations: list[CompanyReservation]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "booking_id": [item.booking_id for item in reservations],
            "space_id": [item.space_id for item in reservations],
            "emp_id": [item.holder_id for item in reservations],
            "employee_name": [item.employee_name for item in reservations],
            "minutes": [
                (item.end_time - item.start_time).total_seconds() / 60.0
                for item in reservations
            ],
        }
    )


class UsageReportService:
    """Per-space and per-employee booking totals, ordered busiest first."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        guard: Optional[AuthorizationGuard] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._guard = guard or AuthorizationGuard(repository=self._repository, settings=self._settings)
        self._timezone = load_timezone(self._settings.booking_timezone)

    def company_usage(self, claims: Claims, on: Optional[date] = None) -> UsageSummary:
        comp_id = self._guard.scope_to_company(claims, Role.MANAGER, action="company usage report")
        reservations = self._repository.list_company_reservations(comp_id)
        if on is not None:
            day_start, day_end = day_bounds(on, self._timezone)
            reservations = [
                item
                for item in reservations
                if windows_overlap(item.start_time, item.end_time, day_start, day_end)
            ]

        if not reservations:
            return UsageSummary(
                comp_id=comp_id,
                total_bookings=0,
                total_booked_minutes=0.0,
                by_space=[],
                by_employee=[],
            )

        frame = _build_usage_frame(reservations)
        by_space = (
            frame.groupby("space_id", as_index=False)
            .agg(booking_count=("booking_id", "count"), booked_minutes=("minutes", "sum"))
            .sort_values(["booked_minutes", "space_id"], ascending=[False, True])
        )
        by_employee = (
            frame.groupby(["emp_id", "employee_name"], as_index=False)
            .agg(booking_count=("booking_id", "count"), booked_minutes=("minutes", "sum"))
            .sort_values(["booked_minutes", "emp_id"], ascending=[False, True])
        )
        logger.info(
            "Usage report for company %s covers %s bookings",
            comp_id,
            len(frame),
        )

        return UsageSummary(
            comp_id=comp_id,
            total_bookings=int(len(frame)),
            total_booked_minutes=float(frame["minutes"].sum()),
            by_space=[
                SpaceUsage(
                    space_id=str(row.space_id),
                    booking_count=int(row.booking_count),
                    booked_minutes=float(row.booked_minutes),
                )
                for row in by_space.itertuples(index=False)
            ],
            by_employee=[
                EmployeeUsage(
                    emp_id=str(row.emp_id),
                    employee_name=str(row.employee_name),
                    booking_count=int(row.booking_count),
                    booked_minutes=float(row.booked_minutes),
                )
                for row in by_employee.itertuples(index=False)
            ],
        )
