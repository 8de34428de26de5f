"""Common schemas and dependencies shared across modules."""

from .dependencies import Pagination, pagination_params
from .schemas import (
    BaseResponse,
    ErrorBody,
    PaginatedResponse,
    PaginationParams,
    SortDirection,
)

__all__ = [
    # Schemas
    "BaseResponse",
    "ErrorBody",
    "PaginatedResponse",
    "PaginationParams",
    "SortDirection",
    # Dependencies
    "Pagination",
    "pagination_params",
]
