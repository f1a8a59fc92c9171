"""Shared route dependencies."""

from typing import Optional

from fastapi import Query
from fastapi.exceptions import RequestValidationError

from ..config import get_settings
from ..core.schemas.common import PaginationQuery, SortField, SortOrder


def _page_size(limit: Optional[int]) -> int:
    """Apply the configured default and ceiling to a requested page size."""
    settings = get_settings()
    if limit is None:
        return settings.default_page_size
    if limit > settings.max_page_size:
        raise RequestValidationError([{
            "type": "less_than_equal",
            "loc": ("query", "limit"),
            "msg": f"Input should be less than or equal to {settings.max_page_size}",
            "input": limit,
            "ctx": {"le": settings.max_page_size},
        }])
    return limit


async def pagination_params(
    cursor: Optional[str] = Query(None, description="Id of the last item already seen"),
    limit: Optional[int] = Query(None, ge=1, description="Page size, capped by max_page_size"),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    order_by: SortOrder = Query("desc", alias="orderBy"),
) -> PaginationQuery:
    return PaginationQuery(cursor=cursor, limit=_page_size(limit), sort_by=sort_by, order_by=order_by)
