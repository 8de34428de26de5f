"""Contractor profile models for PayHub."""

from sqlalchemy import (
    Enum,
    ForeignKeyConstraint,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ...database import Base, SoftDeleteMixin, TenantScoped, TimestampMixin
from ..dwolla.statuses import ProfileStatus


class Profile(TenantScoped, TimestampMixin, SoftDeleteMixin, Base):
    """Contractor onboarded by a tenant and paid through Dwolla."""

    __tablename__ = "profiles"

    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    business_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    address1: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address2: Mapped[str | None] = mapped_column(String(50), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(2), nullable=True)

    status: Mapped[ProfileStatus] = mapped_column(
        Enum(ProfileStatus), nullable=False, default=ProfileStatus.INVITED
    )
    # Custom job whose extra onboarding steps are still open
    pending_job_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Dwolla personal customer
    payments_uri: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payments_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payments_type: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "uuid", name="uq_profiles_tenant_uuid"),
        Index("ix_profiles_tenant_email", "tenant_id", "email", unique=True),
        Index("ix_profiles_status", "tenant_id", "status"),
        Index("ix_profiles_payments_uri", "payments_uri"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return (
            f"<Profile(tenant_id={self.tenant_id}, id={self.id}, "
            f"status={self.status})>"
        )


class FundingSource(TenantScoped, TimestampMixin, SoftDeleteMixin, Base):
    """Bank account linked to a profile's Dwolla customer."""

    __tablename__ = "funding_sources"

    profile_id: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    bank_account_type: Mapped[str] = mapped_column(String(20), nullable=False)
    account_last4: Mapped[str | None] = mapped_column(String(4), nullable=True)
    dwolla_uri: Mapped[str] = mapped_column(String(255), nullable=False)
    dwolla_status: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "uuid", name="uq_funding_sources_tenant_uuid"),
        ForeignKeyConstraint(
            ["tenant_id", "profile_id"],
            ["profiles.tenant_id", "profiles.id"],
            ondelete="CASCADE",
        ),
        Index("ix_funding_sources_profile", "tenant_id", "profile_id"),
    )

    def __repr__(self) -> str:
        return f"<FundingSource(tenant_id={self.tenant_id}, id={self.id})>"
