"""CRUD operations for the profiles module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base_crud import BaseCRUD
from .models import FundingSource, Profile
from .schemas import FundingSourceCreate, ProfileCreate, ProfileUpdate


class ProfileCRUD(BaseCRUD[Profile, ProfileCreate, ProfileUpdate]):
    search_fields = ["first_name", "last_name", "email", "business_name"]


class FundingSourceCRUD(BaseCRUD[FundingSource, FundingSourceCreate, dict]):
    default_order_desc = False


profile_crud = ProfileCRUD(Profile)
funding_source_crud = FundingSourceCRUD(FundingSource)


async def get_profile_by_email(
    db: AsyncSession, tenant_id: int, email: str
) -> Profile | None:
    result = await db.execute(
        select(Profile).where(
            Profile.tenant_id == tenant_id,
            Profile.email == email,
            Profile.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def get_profile_by_payments_uri_for_all_tenants(
    db: AsyncSession, payments_uri: str
) -> Profile | None:
    """Resolve a Dwolla customer to a profile across every tenant (webhook path)."""
    result = await db.execute(
        select(Profile).where(
            Profile.payments_uri == payments_uri,
            Profile.deleted_at.is_(None),
        )
    )
    return result.scalars().first()


async def get_funding_sources(
    db: AsyncSession, tenant_id: int, profile_id: int
) -> list[FundingSource]:
    result = await db.execute(
        select(FundingSource)
        .where(
            FundingSource.tenant_id == tenant_id,
            FundingSource.profile_id == profile_id,
            FundingSource.deleted_at.is_(None),
        )
        .order_by(FundingSource.created_at, FundingSource.id)
    )
    return list(result.scalars().all())


async def has_funding_source(db: AsyncSession, tenant_id: int, profile_id: int) -> bool:
    return await funding_source_crud.exists(db, tenant_id, profile_id=profile_id)
