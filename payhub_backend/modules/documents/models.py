"""Compliance document models for PayHub."""

import enum

from sqlalchemy import Enum, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...database import Base, SoftDeleteMixin, TenantScoped, TimestampMixin
from ..dwolla.statuses import DocumentType, DocumentVerificationStatus


class DocumentOwnerType(str, enum.Enum):
    """Kind of record a document is attached to."""

    COMPANY = "company"
    OWNER = "owner"
    PROFILE = "profile"


class Document(TenantScoped, TimestampMixin, SoftDeleteMixin, Base):
    """Identity or business document submitted to Dwolla for verification."""

    __tablename__ = "documents"

    owner_type: Mapped[DocumentOwnerType] = mapped_column(
        Enum(DocumentOwnerType), nullable=False
    )
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    document_type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType), nullable=False
    )

    # Blob storage
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    ext: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    storage_key: Mapped[str] = mapped_column(String(500), nullable=False)

    # Dwolla verification
    dwolla_uri: Mapped[str | None] = mapped_column(String(255), nullable=True)
    verification_status: Mapped[DocumentVerificationStatus] = mapped_column(
        Enum(DocumentVerificationStatus),
        nullable=False,
        default=DocumentVerificationStatus.PENDING,
    )
    failure_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "uuid", name="uq_documents_tenant_uuid"),
        Index("ix_documents_owner", "tenant_id", "owner_type", "owner_id"),
        Index("ix_documents_dwolla_uri", "dwolla_uri"),
    )

    @property
    def file_name(self) -> str:
        return f"{self.name}.{self.ext}" if self.ext else self.name

    def __repr__(self) -> str:
        return (
            f"<Document(tenant_id={self.tenant_id}, id={self.id}, "
            f"type={self.document_type})>"
        )
