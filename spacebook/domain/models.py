"""Domain models for identities, directory entries and reservations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


class Role(str, Enum):
    """Closed set of disjoint roles; no role implies another."""

    ADMINISTRATOR = "ADMIN"
    MANAGER = "MNG"
    EMPLOYEE = "EMP"


class TokenPurpose(str, Enum):
    ACCESS = "access"
    ACTIVATION = "activation"


@dataclass(frozen=True)
class Identity:
    subject_id: str
    email: str
    role: Role


@dataclass(frozen=True)
class Claims:
    subject_id: str
    email: str
    role: Role
    expires_at: datetime
    purpose: TokenPurpose = TokenPurpose.ACCESS


@dataclass(frozen=True)
class Admin:
    admin_id: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class Company:
    comp_id: str
    company_name: str
    about: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Employee:
    emp_id: str
    name: str
    position: str
    comp_id: str
    email: str
    role: Role
    created_at: datetime
    password_hash: Optional[str] = None

    @property
    def activated(self) -> bool:
        return self.password_hash is not None


@dataclass(frozen=True)
class Space:
    space_id: str
    name: str
    size: int
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Reservation:
    booking_id: str
    space_id: str
    holder_id: str
    start_time: datetime
    end_time: datetime
    created_at: datetime


@dataclass(frozen=True)
class CompanyReservation:
    booking_id: str
    space_id: str
    holder_id: str
    employee_name: str
    email: str
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class BookedWindow:
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True)
class PageResult(Generic[T]):
    items: list[T]
    page: int
    limit: int
    total: int


@dataclass(frozen=True)
class SpaceUsage:
    space_id: str
    booking_count: int
    booked_minutes: float


@dataclass(frozen=True)
class EmployeeUsage:
    emp_id: str
    employee_name: str
    booking_count: int
    booked_minutes: float


@dataclass(frozen=True)
class UsageSummary:
    comp_id: str
    total_bookings: int
    total_booked_minutes: float
    by_space: list[SpaceUsage]
    by_employee: list[EmployeeUsage]
