"""
Base CRUD operations for consistent data access patterns across all modules.

Every query is scoped to a single ``tenant_id``; callers pass it explicitly.
Writes only flush, the owning service decides when to commit.
"""

from abc import ABC
from typing import Any, Generic, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from ..database import get_next_id_for_tenant
from ..modules.commons.schemas import PaginationParams, SortDirection
from .utils import utc_now

# Generic type variables for type safety
ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType")
UpdateSchemaType = TypeVar("UpdateSchemaType")


class BaseCRUD(Generic[ModelType, CreateSchemaType, UpdateSchemaType], ABC):
    """
    Base CRUD class providing common database operations.

    Attributes:
        model: SQLAlchemy model class
        search_fields: Fields to search in for text-based queries
        default_order_by: Default ordering field
    """

    def __init__(self, model: type[ModelType]):
        """Initialize CRUD operations for a specific model."""
        self.model = model

    # Configuration attributes that can be overridden by subclasses
    search_fields: list[str] = []
    default_order_by: str = "created_at"
    default_order_desc: bool = True

    @property
    def _soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _apply_tenant_filter(self, query: Select, tenant_id: int) -> Select:
        """Restrict the query to one tenant and hide soft-deleted rows."""
        query = query.where(self.model.tenant_id == tenant_id)
        if self._soft_deletes:
            query = query.where(self.model.deleted_at.is_(None))
        return query

    def _apply_search_filter(
        self, query: Select, search_query: str | None = None
    ) -> Select:
        """Apply text-based search filtering across configured search fields."""
        if search_query and self.search_fields:
            search_conditions = []
            for field_name in self.search_fields:
                if hasattr(self.model, field_name):
                    field = getattr(self.model, field_name)
                    search_conditions.append(field.ilike(f"%{search_query}%"))
            if search_conditions:
                query = query.where(or_(*search_conditions))
        return query

    def _apply_custom_filters(
        self, query: Select, filters: dict[str, Any] | None = None
    ) -> Select:
        """Apply additional custom filters."""
        if not filters:
            return query

        for field_name, value in filters.items():
            if value is not None and hasattr(self.model, field_name):
                field = getattr(self.model, field_name)
                query = query.where(field == value)
        return query

    def _apply_ordering(
        self,
        query: Select,
        order_by: str | None = None,
        direction: SortDirection | None = None,
    ) -> Select:
        order_field = order_by or self.default_order_by
        descending = (
            direction == SortDirection.DESC
            if direction is not None
            else self.default_order_desc
        )
        if hasattr(self.model, order_field):
            field = getattr(self.model, order_field)
            if descending:
                query = query.order_by(field.desc(), self.model.id.desc())
            else:
                query = query.order_by(field, self.model.id)
        return query

    async def create(
        self,
        db: AsyncSession,
        obj_in: CreateSchemaType | dict[str, Any],
        tenant_id: int,
        **kwargs,
    ) -> ModelType:
        """
        Create a new record inside the tenant.

        Args:
            db: Database session
            obj_in: Data for creating the record
            tenant_id: Tenant ID the record belongs to
            **kwargs: Additional fields to set on the model

        Returns:
            The created (flushed, not committed) model instance
        """
        if isinstance(obj_in, dict):
            obj_data = dict(obj_in)
        else:
            obj_data = obj_in.model_dump(exclude_unset=True)

        obj_data["tenant_id"] = tenant_id
        obj_data["id"] = await get_next_id_for_tenant(db, self.model, tenant_id)
        obj_data.update(kwargs)

        db_obj = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def get(
        self, db: AsyncSession, tenant_id: int, id: int
    ) -> ModelType | None:
        """
        Get a single record by composite key (tenant_id, id).

        Returns:
            The model instance or None if not found
        """
        query = self._apply_tenant_filter(select(self.model), tenant_id)
        query = query.where(self.model.id == id)

        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_multi(
        self,
        db: AsyncSession,
        tenant_id: int,
        pagination: PaginationParams,
        search_query: str | None = None,
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelType], int]:
        """
        Get multiple records with pagination, filtering, and search.

        Args:
            db: Database session
            tenant_id: Tenant ID
            pagination: Pagination parameters
            search_query: Text search query
            filters: Additional equality filters to apply

        Returns:
            Tuple of (records, total_count)
        """
        query = self._apply_tenant_filter(select(self.model), tenant_id)
        query = self._apply_search_filter(query, search_query)
        query = self._apply_custom_filters(query, filters)
        query = self._apply_ordering(
            query, pagination.sort_field, pagination.sort_direction
        )

        count_query = self._apply_tenant_filter(
            select(func.count(self.model.id)), tenant_id
        )
        count_query = self._apply_search_filter(count_query, search_query)
        count_query = self._apply_custom_filters(count_query, filters)

        total_result = await db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.offset(pagination.offset).limit(pagination.page_size)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def update(
        self,
        db: AsyncSession,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | dict[str, Any],
    ) -> ModelType:
        """Apply the given values to an existing record and flush."""
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(
        self, db: AsyncSession, db_obj: ModelType, soft_delete: bool = True
    ) -> ModelType:
        """
        Delete a record (soft delete by default).

        Soft deletion sets the ``deleted_at`` marker; models without one are
        removed.
        """
        if soft_delete and self._soft_deletes:
            db_obj.deleted_at = utc_now()
        else:
            await db.delete(db_obj)
        await db.flush()
        return db_obj

    async def exists(self, db: AsyncSession, tenant_id: int, **filters) -> bool:
        """Check if a record exists in the tenant with the given filters."""
        return await self.count(db, tenant_id, **filters) > 0

    async def count(self, db: AsyncSession, tenant_id: int, **filters) -> int:
        """Count records of the tenant matching the given field filters."""
        query = self._apply_tenant_filter(
            select(func.count(self.model.id)), tenant_id
        )
        query = self._apply_custom_filters(query, filters)

        result = await db.execute(query)
        return result.scalar() or 0
