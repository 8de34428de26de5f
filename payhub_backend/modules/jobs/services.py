"""Jobs a tenant pays contractors for.

Besides plain CRUD, custom jobs gate payments: a contractor taking a custom
job moves from ``active`` to ``job`` and can not be paid until the tenant
marks that job's onboarding as complete.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import ConflictError, NotAcceptableError, ResourceNotFoundError
from ...core.logging import get_logger
from ..commons import PaginationParams
from ..dwolla.statuses import ProfileStatus
from ..profiles import crud as profile_crud
from ..profiles import services as profile_services
from ..profiles.models import Profile
from . import crud
from .models import Job
from .schemas import JobCreate, JobUpdate

logger = get_logger(__name__)

SORTABLE_FIELDS = ("name", "rate", "created_at", "updated_at")


async def get_job(db: AsyncSession, tenant_id: int, job_id: int) -> Job:
    job = await crud.job_crud.get(db, tenant_id, job_id)
    if not job:
        raise ResourceNotFoundError("Job", job_id)
    return job


async def list_jobs(
    db: AsyncSession,
    tenant_id: int,
    pagination: PaginationParams,
    is_active: bool | None = None,
    is_custom: bool | None = None,
    name: str | None = None,
) -> tuple[list[Job], int]:
    """
    List the tenant's jobs.

    Raises:
        NotAcceptableError: If the sort field is not one of SORTABLE_FIELDS
    """
    if pagination.sort_field and pagination.sort_field not in SORTABLE_FIELDS:
        raise NotAcceptableError(
            f"Invalid sort field, allowed: {', '.join(SORTABLE_FIELDS)}",
            details={"allowed": list(SORTABLE_FIELDS)},
        )
    return await crud.job_crud.get_multi(
        db,
        tenant_id,
        pagination,
        search_query=name,
        filters={"is_active": is_active, "is_custom": is_custom},
    )


async def create_job(db: AsyncSession, tenant_id: int, data: JobCreate) -> Job:
    """
    Raises:
        ConflictError: If the tenant already has a job with this name
    """
    if await crud.get_job_by_name(db, tenant_id, data.name):
        raise ConflictError(f"Job with name '{data.name}' already exists")

    job = await crud.job_crud.create(db, data.model_dump(), tenant_id)
    await db.commit()
    return job


async def update_job(
    db: AsyncSession, tenant_id: int, job_id: int, data: JobUpdate
) -> Job:
    job = await get_job(db, tenant_id, job_id)
    values = data.model_dump(exclude_unset=True)
    # name, is_active and is_custom can not be cleared
    for field in ("name", "is_active", "is_custom"):
        if values.get(field, False) is None:
            del values[field]

    if "name" in values and values["name"] != job.name:
        if await crud.get_job_by_name(db, tenant_id, values["name"]):
            raise ConflictError(f"Job with name '{values['name']}' already exists")

    job = await crud.job_crud.update(db, job, values)
    await db.commit()
    return job


async def delete_job(db: AsyncSession, tenant_id: int, job_id: int) -> None:
    """
    Soft-delete a job.

    Raises:
        ConflictError: While contractors still have its onboarding pending
    """
    job = await get_job(db, tenant_id, job_id)
    pending = await profile_crud.profile_crud.count(
        db, tenant_id, pending_job_id=job.id
    )
    if pending:
        raise ConflictError(
            f"Job {job_id} has contractors with pending onboarding",
            details={"profiles": pending},
        )

    await crud.job_crud.delete(db, job)
    await db.commit()


# ----- Job onboarding -----


async def start_job_onboarding(
    db: AsyncSession, tenant_id: int, job_id: int, profile_id: int
) -> Profile:
    """
    Put an active contractor on hold until a custom job's onboarding is done.

    Raises:
        NotAcceptableError: If the job is inactive or not custom, or the
            profile is not active
    """
    job = await get_job(db, tenant_id, job_id)
    if not job.is_active or not job.is_custom:
        raise NotAcceptableError(
            f"Job {job_id} has no onboarding steps to complete",
            details={"is_active": job.is_active, "is_custom": job.is_custom},
        )

    profile = await profile_services.get_profile(db, tenant_id, profile_id)
    if profile.status != ProfileStatus.ACTIVE:
        raise NotAcceptableError(
            f"Profile {profile_id} can not start a job at status "
            f"'{profile.status.value}'",
            details={"status": profile.status.value},
        )

    profile = await profile_crud.profile_crud.update(
        db, profile, {"pending_job_id": job.id, "status": ProfileStatus.JOB}
    )
    await db.commit()

    logger.info(f"Profile {tenant_id}/{profile_id} is onboarding for job {job_id}")
    return profile


async def complete_job_onboarding(
    db: AsyncSession, tenant_id: int, job_id: int, profile_id: int
) -> Profile:
    """
    Close a contractor's pending job onboarding.

    The onboarding status is derived again, which returns a verified
    contractor with a bank account to ``active``.

    Raises:
        NotAcceptableError: If the profile is not onboarding for this job
    """
    job = await get_job(db, tenant_id, job_id)
    profile = await profile_services.get_profile(db, tenant_id, profile_id)
    if profile.pending_job_id != job.id:
        raise NotAcceptableError(
            f"Profile {profile_id} has no pending onboarding for job {job_id}",
            details={"pending_job_id": profile.pending_job_id},
        )

    profile = await profile_crud.profile_crud.update(
        db, profile, {"pending_job_id": None}
    )
    await profile_services.sync_onboarding_status(db, profile)
    await db.commit()
    await db.refresh(profile)
    return profile
