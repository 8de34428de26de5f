"""Tenant onboarding API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import AdminReaderUser, AdminUser
from ..commons import BaseResponse, PaginatedResponse, Pagination
from ..dwolla.client import DwollaClient, get_dwolla_client
from . import services
from .schemas import (
    BeneficialOwnerCreate,
    BeneficialOwnerResponse,
    BeneficialOwnerUpdate,
    BusinessClassificationResponse,
    CompanyCreate,
    CompanyResponse,
    CompanyRetry,
    CompanyUpdate,
    ControllerResponse,
    OwnershipCertificationResponse,
    TenantResponse,
)

router = APIRouter(prefix="/tenant", tags=["Tenant"])
owners_router = APIRouter(prefix="/beneficial-owners", tags=["Beneficial Owners"])

DbSession = Annotated[AsyncSession, Depends(get_db)]
Dwolla = Annotated[DwollaClient, Depends(get_dwolla_client)]


# ----- Tenant -----


@router.get("", response_model=BaseResponse[TenantResponse])
async def get_tenant(current_user: AdminReaderUser, db: DbSession):
    """Get the caller's tenant."""
    tenant = await services.get_tenant(db, current_user.tenant_id)
    return BaseResponse(success=True, data=TenantResponse.model_validate(tenant))


# ----- Company -----


@router.get("/company", response_model=BaseResponse[CompanyResponse])
async def get_company(current_user: AdminReaderUser, db: DbSession):
    """Get the tenant's company and its Dwolla status."""
    company = await services.get_company(db, current_user.tenant_id)
    return BaseResponse(success=True, data=CompanyResponse.model_validate(company))


@router.get("/company/controller", response_model=BaseResponse[ControllerResponse])
async def get_company_controller(current_user: AdminReaderUser, db: DbSession):
    company = await services.get_company_controller(db, current_user.tenant_id)
    return BaseResponse(success=True, data=ControllerResponse.model_validate(company))


@router.post("/company", response_model=BaseResponse[CompanyResponse])
async def create_company(
    data: CompanyCreate,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    """Submit the tenant's company for verification."""
    company = await services.create_company(db, client, current_user.tenant_id, data)
    return BaseResponse(
        success=True,
        message="Company created successfully",
        data=CompanyResponse.model_validate(company),
    )


@router.patch("/company", response_model=BaseResponse[CompanyResponse])
async def update_company(
    data: CompanyUpdate,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    """Update the fields allowed at the company's current status."""
    company = await services.update_company(db, client, current_user.tenant_id, data)
    return BaseResponse(
        success=True,
        message="Company updated successfully",
        data=CompanyResponse.model_validate(company),
    )


@router.put("/company", response_model=BaseResponse[CompanyResponse])
async def retry_company(
    data: CompanyRetry,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    """Re-submit the company after a retry or document request."""
    company = await services.retry_company(db, client, current_user.tenant_id, data)
    return BaseResponse(
        success=True,
        message="Company re-submitted successfully",
        data=CompanyResponse.model_validate(company),
    )


@router.get(
    "/company/business-classifications",
    response_model=BaseResponse[list[BusinessClassificationResponse]],
)
async def list_business_classifications(
    current_user: AdminReaderUser, client: Dwolla
):
    classifications = await services.list_business_classifications(client)
    return BaseResponse(
        success=True,
        data=[
            BusinessClassificationResponse.model_validate(c) for c in classifications
        ],
    )


# ----- Beneficial Owners -----


@owners_router.get(
    "", response_model=BaseResponse[PaginatedResponse[BeneficialOwnerResponse]]
)
async def list_owners(
    current_user: AdminReaderUser,
    db: DbSession,
    pagination: Pagination,
):
    owners, total = await services.list_owners(db, current_user.tenant_id, pagination)
    items = [BeneficialOwnerResponse.model_validate(o) for o in owners]
    return BaseResponse(
        success=True, data=PaginatedResponse.of(items, total, pagination)
    )


@owners_router.post(
    "/certify", response_model=BaseResponse[OwnershipCertificationResponse]
)
async def certify_ownership(current_user: AdminUser, db: DbSession, client: Dwolla):
    """Certify that the beneficial owner list is complete."""
    status = await services.certify_ownership(db, client, current_user.tenant_id)
    return BaseResponse(
        success=True,
        message="Beneficial ownership certified",
        data=OwnershipCertificationResponse(status=status),
    )


@owners_router.get("/{owner_id}", response_model=BaseResponse[BeneficialOwnerResponse])
async def get_owner(owner_id: int, current_user: AdminReaderUser, db: DbSession):
    owner = await services.get_owner(db, current_user.tenant_id, owner_id)
    return BaseResponse(
        success=True, data=BeneficialOwnerResponse.model_validate(owner)
    )


@owners_router.post("", response_model=BaseResponse[BeneficialOwnerResponse])
async def add_owner(
    data: BeneficialOwnerCreate,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    owner = await services.add_owner(db, client, current_user.tenant_id, data)
    return BaseResponse(
        success=True,
        message="Beneficial owner added successfully",
        data=BeneficialOwnerResponse.model_validate(owner),
    )


@owners_router.put("/{owner_id}", response_model=BaseResponse[BeneficialOwnerResponse])
async def edit_owner(
    owner_id: int,
    data: BeneficialOwnerUpdate,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    owner = await services.edit_owner(
        db, client, current_user.tenant_id, owner_id, data
    )
    return BaseResponse(
        success=True,
        message="Beneficial owner updated successfully",
        data=BeneficialOwnerResponse.model_validate(owner),
    )


@owners_router.delete("/{owner_id}", response_model=BaseResponse[None])
async def delete_owner(
    owner_id: int,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    await services.delete_owner(db, client, current_user.tenant_id, owner_id)
    return BaseResponse(success=True, message="Beneficial owner removed successfully")
