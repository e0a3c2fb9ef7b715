"""HTTP controller layer for companies and employees."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from spacebook.controllers.dependencies import get_directory_service, require_claims
from spacebook.controllers.envelope import Envelope, MessageResponse, ok
from spacebook.domain.models import Claims, Company, Employee, Role
from spacebook.services.directory_service import DirectoryService, EmployeeInvite


router = APIRouter(tags=["directory"])


class InviteRequest(BaseModel):
    name: str = Field(min_length=1)
    position: str = Field(min_length=1)
    email: str = Field(min_length=3)

    def to_invite(self) -> EmployeeInvite:
        return EmployeeInvite(name=self.name, position=self.position, email=self.email)


class CreateCompanyRequest(BaseModel):
    company_name: str = Field(min_length=1)
    about: Optional[str] = None
    manager: InviteRequest


class UpdateCompanyRequest(BaseModel):
    company_name: Optional[str] = Field(default=None, min_length=1)
    about: Optional[str] = None


class UpdateEmployeeRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    position: Optional[str] = Field(default=None, min_length=1)


class CreatedCompanyResponse(BaseModel):
    comp_id: str
    manager_id: str
    activation_token: str


class CreatedEmployeeResponse(BaseModel):
    emp_id: str
    activation_token: str


class CompanyResponse(BaseModel):
    comp_id: str
    company_name: str
    about: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, company: Company) -> "CompanyResponse":
        return cls(**vars(company))


class EmployeeResponse(BaseModel):
    """Password material never leaves the service layer; only activation state does."""

    emp_id: str
    name: str
    position: str
    comp_id: str
    email: str
    role: Role
    activated: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, employee: Employee) -> "EmployeeResponse":
        return cls(
            emp_id=employee.emp_id,
            name=employee.name,
            position=employee.position,
            comp_id=employee.comp_id,
            email=employee.email,
            role=employee.role,
            activated=employee.activated,
            created_at=employee.created_at,
        )


class CompanyPageResponse(BaseModel):
    page: int
    limit: int
    total: int
    items: list[CompanyResponse]


class EmployeePageResponse(BaseModel):
    page: int
    limit: int
    total: int
    items: list[EmployeeResponse]


# --- Companies (administrators) ---


@router.post(
    "/companies",
    response_model=Envelope[CreatedCompanyResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_company(
    payload: CreateCompanyRequest,
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    """Create a company together with its first manager and return the manager's activation token."""
    created = service.create_company(
        claims,
        company_name=payload.company_name,
        about=payload.about,
        manager=payload.manager.to_invite(),
    )
    return ok(
        CreatedCompanyResponse(
            comp_id=created.comp_id,
            manager_id=created.manager_id,
            activation_token=created.activation_token,
        )
    )


@router.get("/companies", response_model=Envelope[CompanyPageResponse])
def list_companies(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    company_name: Optional[str] = Query(default=None),
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    result = service.list_companies(claims, page=page, limit=limit, company_name=company_name)
    return ok(
        CompanyPageResponse(
            page=result.page,
            limit=result.limit,
            total=result.total,
            items=[CompanyResponse.from_domain(item) for item in result.items],
        )
    )


@router.get("/companies/{comp_id}", response_model=Envelope[CompanyResponse])
def get_company(
    comp_id: str,
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    return ok(CompanyResponse.from_domain(service.get_company(claims, comp_id)))


@router.patch("/companies/{comp_id}", response_model=Envelope[CompanyResponse])
def update_company(
    comp_id: str,
    payload: UpdateCompanyRequest,
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    company = service.update_company(
        claims,
        comp_id,
        company_name=payload.company_name,
        about=payload.about,
    )
    return ok(CompanyResponse.from_domain(company))


@router.delete("/companies/{comp_id}", response_model=Envelope[MessageResponse])
def delete_company(
    comp_id: str,
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    service.delete_company(claims, comp_id)
    return ok(MessageResponse(message="company deleted"))


@router.get("/me/company", response_model=Envelope[CompanyResponse])
def get_my_company(
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    return ok(CompanyResponse.from_domain(service.get_my_company(claims)))


# --- Employees (managers, own company only) ---


@router.post(
    "/employees",
    response_model=Envelope[CreatedEmployeeResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_employee(
    payload: InviteRequest,
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    created = service.create_employee(claims, payload.to_invite())
    return ok(CreatedEmployeeResponse(emp_id=created.emp_id, activation_token=created.activation_token))


@router.get("/employees", response_model=Envelope[EmployeePageResponse])
def list_employees(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    name: Optional[str] = Query(default=None),
    position: Optional[str] = Query(default=None),
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    result = service.list_employees(claims, page=page, limit=limit, name=name, position=position)
    return ok(
        EmployeePageResponse(
            page=result.page,
            limit=result.limit,
            total=result.total,
            items=[EmployeeResponse.from_domain(item) for item in result.items],
        )
    )


@router.get("/employees/{emp_id}", response_model=Envelope[EmployeeResponse])
def get_employee(
    emp_id: str,
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    return ok(EmployeeResponse.from_domain(service.get_employee(claims, emp_id)))


@router.patch("/employees/{emp_id}", response_model=Envelope[EmployeeResponse])
def update_employee(
    emp_id: str,
    payload: UpdateEmployeeRequest,
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    employee = service.update_employee(claims, emp_id, name=payload.name, position=payload.position)
    return ok(EmployeeResponse.from_domain(employee))


@router.delete("/employees/{emp_id}", response_model=Envelope[MessageResponse])
def delete_employee(
    emp_id: str,
    claims: Claims = Depends(require_claims),
    service: DirectoryService = Depends(get_directory_service),
) -> dict:
    service.delete_employee(claims, emp_id)
    return ok(MessageResponse(message="employee deleted"))
