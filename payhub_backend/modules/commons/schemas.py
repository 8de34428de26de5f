"""Response envelope and list paging shared by every module."""

import math
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from ...core.utils import utc_now

T = TypeVar("T")

MAX_PAGE_SIZE = 100


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ErrorBody(BaseModel):
    """Machine-readable part of a failed response."""

    category: str
    details: dict[str, Any] = Field(default_factory=dict)


class BaseResponse(BaseModel, Generic[T]):
    """Envelope of every API answer, successful or not."""

    success: bool = True
    message: str | None = None
    data: T | None = None
    error: ErrorBody | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class PaginationParams(BaseModel):
    """Page window and optional ordering of a tenant-scoped listing."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=MAX_PAGE_SIZE)
    sort_field: str | None = None
    sort_direction: SortDirection | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 0

    @classmethod
    def of(
        cls, items: list[T], total: int, pagination: PaginationParams
    ) -> "PaginatedResponse[T]":
        """Page of ``items`` out of ``total`` matching rows."""
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=math.ceil(total / pagination.page_size),
        )
