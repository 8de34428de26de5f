"""Tenant models for PayHub.

- Tenants (organizations onboarding contractors)
- The tenant's business identity submitted to Dwolla
- Beneficial owners of that business
"""

from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ...core.database_types import UUID as UUID_DB
from ...database import Base, SoftDeleteMixin, TenantScoped, TimestampMixin


class Tenant(TimestampMixin, Base):
    """Top-level tenant. Every scoped row references it."""

    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[UUID] = mapped_column(
        UUID_DB(), unique=True, nullable=False, default=uuid4
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name})>"


class TenantCompany(TenantScoped, TimestampMixin, SoftDeleteMixin, Base):
    """Business identity of a tenant, mirrored as a Dwolla business customer.

    ``dwolla_status`` only ever holds a value returned by Dwolla or derived
    from one of its webhook topics.
    """

    __tablename__ = "tenant_companies"

    # Contact person
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Address
    address1: Mapped[str] = mapped_column(String(50), nullable=False)
    address2: Mapped[str | None] = mapped_column(String(50), nullable=True)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(2), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(2), nullable=False, default="US")

    # Business
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    doing_business_as: Mapped[str | None] = mapped_column(String(255), nullable=True)
    business_type: Mapped[str] = mapped_column(String(50), nullable=False)
    business_classification: Mapped[str] = mapped_column(String(64), nullable=False)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Controller (identity numbers are sent to Dwolla, never stored)
    controller_first_name: Mapped[str | None] = mapped_column(
        String(120), nullable=True
    )
    controller_last_name: Mapped[str | None] = mapped_column(
        String(120), nullable=True
    )
    controller_title: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # Dwolla
    dwolla_uri: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dwolla_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    dwolla_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "uuid", name="uq_tenant_companies_tenant_uuid"),
        UniqueConstraint("tenant_id", name="uq_tenant_companies_tenant"),
        Index("ix_tenant_companies_dwolla_uri", "dwolla_uri"),
    )

    def __repr__(self) -> str:
        return (
            f"<TenantCompany(tenant_id={self.tenant_id}, id={self.id}, "
            f"status={self.dwolla_status})>"
        )


class BeneficialOwner(TenantScoped, TimestampMixin, SoftDeleteMixin, Base):
    """Natural person disclosed as a controlling party of a tenant company."""

    __tablename__ = "beneficial_owners"

    company_id: Mapped[int] = mapped_column(Integer, nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    title: Mapped[str | None] = mapped_column(String(120), nullable=True)

    address1: Mapped[str] = mapped_column(String(50), nullable=False)
    address2: Mapped[str | None] = mapped_column(String(50), nullable=True)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state_province_region: Mapped[str] = mapped_column(String(50), nullable=False)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(String(2), nullable=False)

    dwolla_uri: Mapped[str | None] = mapped_column(String(255), nullable=True)
    verification_status: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "uuid", name="uq_beneficial_owners_tenant_uuid"),
        ForeignKeyConstraint(
            ["tenant_id", "company_id"],
            ["tenant_companies.tenant_id", "tenant_companies.id"],
            ondelete="CASCADE",
        ),
        Index("ix_beneficial_owners_company", "tenant_id", "company_id"),
        Index("ix_beneficial_owners_dwolla_uri", "dwolla_uri"),
    )

    def __repr__(self) -> str:
        return f"<BeneficialOwner(tenant_id={self.tenant_id}, id={self.id})>"
