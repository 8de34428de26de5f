"""Contractor profile API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import AdminReaderUser, AdminUser
from ..commons import BaseResponse, PaginatedResponse, Pagination
from ..dwolla.client import DwollaClient, get_dwolla_client
from ..dwolla.statuses import ProfileStatus
from . import services
from .schemas import (
    CustomerRegistration,
    FundingSourceCreate,
    FundingSourceResponse,
    ProfileCreate,
    ProfileResponse,
    ProfileUpdate,
)

router = APIRouter(prefix="/profiles", tags=["Profiles"])

DbSession = Annotated[AsyncSession, Depends(get_db)]
Dwolla = Annotated[DwollaClient, Depends(get_dwolla_client)]


# ----- Profiles -----


@router.get("", response_model=BaseResponse[PaginatedResponse[ProfileResponse]])
async def list_profiles(
    current_user: AdminReaderUser,
    db: DbSession,
    pagination: Pagination,
    status: ProfileStatus | None = None,
    search: str | None = Query(None, max_length=100),
):
    """List the tenant's contractor profiles."""
    profiles, total = await services.list_profiles(
        db, current_user.tenant_id, pagination, status=status, search=search
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.of(
            [ProfileResponse.model_validate(p) for p in profiles], total, pagination
        ),
    )


@router.post("", response_model=BaseResponse[ProfileResponse])
async def create_profile(data: ProfileCreate, current_user: AdminUser, db: DbSession):
    """Invite a contractor."""
    profile = await services.create_profile(db, current_user.tenant_id, data)
    return BaseResponse(
        success=True,
        message="Profile created successfully",
        data=ProfileResponse.model_validate(profile),
    )


@router.get("/{profile_id}", response_model=BaseResponse[ProfileResponse])
async def get_profile(profile_id: int, current_user: AdminReaderUser, db: DbSession):
    profile = await services.get_profile(db, current_user.tenant_id, profile_id)
    return BaseResponse(success=True, data=ProfileResponse.model_validate(profile))


@router.patch("/{profile_id}", response_model=BaseResponse[ProfileResponse])
async def update_profile(
    profile_id: int,
    data: ProfileUpdate,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    profile = await services.update_profile(
        db, client, current_user.tenant_id, profile_id, data
    )
    return BaseResponse(
        success=True,
        message="Profile updated successfully",
        data=ProfileResponse.model_validate(profile),
    )


@router.post("/{profile_id}/customer", response_model=BaseResponse[ProfileResponse])
async def register_customer(
    profile_id: int,
    data: CustomerRegistration,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    """Register the contractor with Dwolla as a personal verified customer."""
    profile = await services.register_customer(
        db, client, current_user.tenant_id, profile_id, data
    )
    return BaseResponse(
        success=True,
        message="Customer registered successfully",
        data=ProfileResponse.model_validate(profile),
    )


# ----- Funding Sources -----


@router.get(
    "/{profile_id}/funding-sources",
    response_model=BaseResponse[list[FundingSourceResponse]],
)
async def list_funding_sources(
    profile_id: int, current_user: AdminReaderUser, db: DbSession
):
    sources = await services.list_funding_sources(
        db, current_user.tenant_id, profile_id
    )
    return BaseResponse(
        success=True,
        data=[FundingSourceResponse.model_validate(s) for s in sources],
    )


@router.post(
    "/{profile_id}/funding-sources",
    response_model=BaseResponse[FundingSourceResponse],
)
async def add_funding_source(
    profile_id: int,
    data: FundingSourceCreate,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    source = await services.add_funding_source(
        db, client, current_user.tenant_id, profile_id, data
    )
    return BaseResponse(
        success=True,
        message="Funding source added successfully",
        data=FundingSourceResponse.model_validate(source),
    )


@router.delete(
    "/{profile_id}/funding-sources/{funding_source_id}",
    response_model=BaseResponse[None],
)
async def remove_funding_source(
    profile_id: int,
    funding_source_id: int,
    current_user: AdminUser,
    db: DbSession,
    client: Dwolla,
):
    await services.remove_funding_source(
        db, client, current_user.tenant_id, profile_id, funding_source_id
    )
    return BaseResponse(success=True, message="Funding source removed successfully")
