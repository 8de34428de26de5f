"""Query parameter dependencies shared by list routes."""

from typing import Annotated

from fastapi import Depends, Query

from .schemas import MAX_PAGE_SIZE, PaginationParams, SortDirection


def pagination_params(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    sort_field: str | None = Query(None, max_length=64),
    sort_direction: SortDirection | None = None,
) -> PaginationParams:
    return PaginationParams(
        page=page,
        page_size=page_size,
        sort_field=sort_field,
        sort_direction=sort_direction,
    )


Pagination = Annotated[PaginationParams, Depends(pagination_params)]
