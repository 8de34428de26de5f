"""CRUD operations for the jobs module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base_crud import BaseCRUD
from .models import Job
from .schemas import JobCreate, JobUpdate


class JobCRUD(BaseCRUD[Job, JobCreate, JobUpdate]):
    search_fields = ["name", "description"]


job_crud = JobCRUD(Job)


async def get_job_by_name(db: AsyncSession, tenant_id: int, name: str) -> Job | None:
    result = await db.execute(
        select(Job).where(
            Job.tenant_id == tenant_id,
            Job.name == name,
            Job.deleted_at.is_(None),
        )
    )
    return result.scalars().first()
