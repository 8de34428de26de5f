"""CRUD operations for the tenants module."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.base_crud import BaseCRUD
from .models import BeneficialOwner, Tenant, TenantCompany
from .schemas import (
    BeneficialOwnerCreate,
    BeneficialOwnerUpdate,
    CompanyCreate,
    CompanyUpdate,
)


class TenantCompanyCRUD(BaseCRUD[TenantCompany, CompanyCreate, CompanyUpdate]):
    search_fields = ["business_name", "doing_business_as"]


class BeneficialOwnerCRUD(
    BaseCRUD[BeneficialOwner, BeneficialOwnerCreate, BeneficialOwnerUpdate]
):
    search_fields = ["first_name", "last_name"]
    default_order_desc = False


company_crud = TenantCompanyCRUD(TenantCompany)
owner_crud = BeneficialOwnerCRUD(BeneficialOwner)


# ----- Tenant CRUD -----


async def get_tenant_by_id(db: AsyncSession, tenant_id: int) -> Tenant | None:
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id))
    return result.scalar_one_or_none()


async def create_tenant(db: AsyncSession, name: str) -> Tenant:
    """Create a new tenant (tenant-creation path, not scoped)."""
    tenant = Tenant(name=name, is_active=True)
    db.add(tenant)
    await db.flush()
    return tenant


# ----- Company CRUD -----


async def get_company_by_tenant(
    db: AsyncSession, tenant_id: int
) -> TenantCompany | None:
    """The tenant's company; a tenant has at most one."""
    result = await db.execute(
        select(TenantCompany).where(
            TenantCompany.tenant_id == tenant_id,
            TenantCompany.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def get_company_by_dwolla_uri_for_all_tenants(
    db: AsyncSession, dwolla_uri: str
) -> TenantCompany | None:
    """Resolve a Dwolla customer across every tenant (webhook path)."""
    result = await db.execute(
        select(TenantCompany).where(
            TenantCompany.dwolla_uri == dwolla_uri,
            TenantCompany.deleted_at.is_(None),
        )
    )
    return result.scalars().first()


# ----- Beneficial Owner CRUD -----


async def get_owner_by_dwolla_uri_for_all_tenants(
    db: AsyncSession, dwolla_uri: str
) -> BeneficialOwner | None:
    """Resolve a Dwolla beneficial owner across every tenant (webhook path)."""
    result = await db.execute(
        select(BeneficialOwner).where(
            BeneficialOwner.dwolla_uri == dwolla_uri,
            BeneficialOwner.deleted_at.is_(None),
        )
    )
    return result.scalars().first()
