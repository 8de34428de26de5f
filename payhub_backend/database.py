"""
Database configuration for the PayHub onboarding backend.

Tenant-scoped tables share a composite primary key ``(tenant_id, id)``: ids
are allocated per tenant and every lookup has to name the tenant it runs for.
"""

from collections.abc import AsyncIterator
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    event,
    select,
    text,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import (
    Mapped,
    declarative_base,
    declared_attr,
    mapped_column,
)
from sqlalchemy.sql import func

from .config import settings
from .core.database_types import UUID as UUID_DB
from .core.utils import utc_now

connect_args = {}
if settings.database_url.startswith("mysql+asyncmy"):
    connect_args = {
        "ssl": {
            "check_hostname": settings.database_ssl_check_hostname,
            "verify_cert": settings.database_ssl_verify_cert,
        },
    }

engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_recycle=3600,
)

AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

Base = declarative_base()


class TimestampMixin:
    """Mixin to add created and updated timestamps to models."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
    )


class SoftDeleteMixin:
    """Nullable deletion marker; rows carrying it are hidden from lookups."""

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )


class TenantScoped:
    """Mixin for tenant scoped models.

    Models using this mixin have:
    - Composite primary key: (tenant_id, id)
    - A per-tenant ``id`` allocated on insert
    - A UUID for external references, unique within the tenant
    """

    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        primary_key=True,
        nullable=False,
        index=True,
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        nullable=False,
    )

    uuid: Mapped[UUID] = mapped_column(UUID_DB(), nullable=False, index=True)

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint(
                "tenant_id",
                "uuid",
                name=f"uq_{cls.__tablename__}_tenant_uuid",
            ),
        )


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_next_id_for_tenant(
    session: AsyncSession, model_class, tenant_id: int
) -> int:
    """Get the next available ID for a table within a tenant scope.

    Args:
        session: Async database session
        model_class: SQLAlchemy model class
        tenant_id: Tenant ID

    Returns:
        Next available ID for the tenant
    """
    result = await session.execute(
        select(func.coalesce(func.max(model_class.id), 0) + 1).where(
            model_class.tenant_id == tenant_id
        )
    )
    return result.scalar_one()


@event.listens_for(TenantScoped, "before_insert", propagate=True)
def set_tenant_key_fields(mapper, connection, target):
    """Allocate the per-tenant id and the UUID before insert."""
    if getattr(target, "uuid", None) is None:
        target.uuid = uuid4()

    if target.id is None and target.tenant_id is not None:
        table_name = mapper.persist_selectable.name
        result = connection.execute(
            text(
                f"SELECT COALESCE(MAX(id), 0) + 1 FROM {table_name} "
                f"WHERE tenant_id = :tenant_id"
            ),
            {"tenant_id": target.tenant_id},
        )
        target.id = result.scalar()
