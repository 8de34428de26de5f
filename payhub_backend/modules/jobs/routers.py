"""Job API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import AdminReaderUser, AdminUser
from ..commons import BaseResponse, PaginatedResponse, Pagination
from ..profiles.schemas import ProfileResponse
from . import services
from .schemas import JobCreate, JobResponse, JobUpdate

router = APIRouter(prefix="/jobs", tags=["Jobs"])

DbSession = Annotated[AsyncSession, Depends(get_db)]


@router.get("", response_model=BaseResponse[PaginatedResponse[JobResponse]])
async def list_jobs(
    current_user: AdminReaderUser,
    db: DbSession,
    pagination: Pagination,
    is_active: bool | None = None,
    is_custom: bool | None = None,
    name: str | None = Query(None, max_length=120),
):
    jobs, total = await services.list_jobs(
        db,
        current_user.tenant_id,
        pagination,
        is_active=is_active,
        is_custom=is_custom,
        name=name,
    )
    items = [JobResponse.model_validate(j) for j in jobs]
    return BaseResponse(
        success=True, data=PaginatedResponse.of(items, total, pagination)
    )


@router.post("", response_model=BaseResponse[JobResponse])
async def create_job(data: JobCreate, current_user: AdminUser, db: DbSession):
    job = await services.create_job(db, current_user.tenant_id, data)
    return BaseResponse(
        success=True,
        message="Job created successfully",
        data=JobResponse.model_validate(job),
    )


@router.get("/{job_id}", response_model=BaseResponse[JobResponse])
async def get_job(job_id: int, current_user: AdminReaderUser, db: DbSession):
    job = await services.get_job(db, current_user.tenant_id, job_id)
    return BaseResponse(success=True, data=JobResponse.model_validate(job))


@router.patch("/{job_id}", response_model=BaseResponse[JobResponse])
async def update_job(
    job_id: int, data: JobUpdate, current_user: AdminUser, db: DbSession
):
    job = await services.update_job(db, current_user.tenant_id, job_id, data)
    return BaseResponse(
        success=True,
        message="Job updated successfully",
        data=JobResponse.model_validate(job),
    )


@router.delete("/{job_id}", response_model=BaseResponse[None])
async def delete_job(job_id: int, current_user: AdminUser, db: DbSession):
    await services.delete_job(db, current_user.tenant_id, job_id)
    return BaseResponse(success=True, message="Job deleted successfully")


# ----- Job onboarding -----


@router.post(
    "/{job_id}/profiles/{profile_id}", response_model=BaseResponse[ProfileResponse]
)
async def start_job_onboarding(
    job_id: int, profile_id: int, current_user: AdminUser, db: DbSession
):
    """Hold a contractor at the job status until the job's onboarding is done."""
    profile = await services.start_job_onboarding(
        db, current_user.tenant_id, job_id, profile_id
    )
    return BaseResponse(
        success=True,
        message="Job onboarding started",
        data=ProfileResponse.model_validate(profile),
    )


@router.post(
    "/{job_id}/profiles/{profile_id}/complete",
    response_model=BaseResponse[ProfileResponse],
)
async def complete_job_onboarding(
    job_id: int, profile_id: int, current_user: AdminUser, db: DbSession
):
    profile = await services.complete_job_onboarding(
        db, current_user.tenant_id, job_id, profile_id
    )
    return BaseResponse(
        success=True,
        message="Job onboarding completed",
        data=ProfileResponse.model_validate(profile),
    )
