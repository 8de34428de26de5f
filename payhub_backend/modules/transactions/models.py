"""Transaction models for PayHub."""

from decimal import Decimal

from sqlalchemy import (
    Enum,
    ForeignKeyConstraint,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ...database import Base, TenantScoped, TimestampMixin
from ..dwolla.statuses import TERMINAL_TRANSFER_STATUSES, TransferStatus


class Transaction(TenantScoped, TimestampMixin, Base):
    """Money movement from the tenant's balance to a contractor's bank.

    Only webhook-driven updates and explicit cancellation change the status.
    Rows are never deleted.
    """

    __tablename__ = "transactions"

    profile_id: Mapped[int] = mapped_column(Integer, nullable=False)
    funding_source_id: Mapped[int] = mapped_column(Integer, nullable=False)
    job_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Transfer location returned by Dwolla
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[TransferStatus] = mapped_column(
        Enum(TransferStatus), nullable=False, default=TransferStatus.PENDING
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "uuid", name="uq_transactions_tenant_uuid"),
        UniqueConstraint("external_id", name="uq_transactions_external_id"),
        ForeignKeyConstraint(
            ["tenant_id", "profile_id"],
            ["profiles.tenant_id", "profiles.id"],
        ),
        Index("ix_transactions_profile", "tenant_id", "profile_id"),
        Index("ix_transactions_status", "tenant_id", "status"),
        Index("ix_transactions_job", "tenant_id", "job_id"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_TRANSFER_STATUSES

    def __repr__(self) -> str:
        return (
            f"<Transaction(tenant_id={self.tenant_id}, id={self.id}, "
            f"status={self.status})>"
        )
