"""Job models for PayHub."""

from decimal import Decimal

from sqlalchemy import Boolean, Index, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...database import Base, SoftDeleteMixin, TenantScoped, TimestampMixin


class Job(TenantScoped, TimestampMixin, SoftDeleteMixin, Base):
    """Work a tenant pays contractors for.

    Custom jobs carry onboarding steps of their own; a contractor taking one
    stays at the ``job`` onboarding status until those steps are done.
    """

    __tablename__ = "jobs"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_custom: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "uuid", name="uq_jobs_tenant_uuid"),
        Index("ix_jobs_tenant_name", "tenant_id", "name"),
    )

    def __repr__(self) -> str:
        return f"<Job(tenant_id={self.tenant_id}, id={self.id}, name={self.name})>"
