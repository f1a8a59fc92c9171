"""
Shared schemas - camelCase base, pagination, errors
"""

from typing import Any, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...config import get_settings

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


SortField = Literal["createdAt", "updatedAt", "name"]
SortOrder = Literal["asc", "desc"]

# wire sort field -> model attribute
SORT_COLUMNS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "name": "name",
}


class PaginationQuery(CamelModel):
    """Cursor pagination query parameters."""

    cursor: Optional[str] = Field(default=None, description="Id of the last item already seen")
    limit: int = Field(default_factory=lambda: get_settings().default_page_size, ge=1)
    sort_by: SortField = Field(default="createdAt")
    order_by: SortOrder = Field(default="desc")

    @property
    def sort_column(self) -> str:
        return SORT_COLUMNS[self.sort_by]


class PageMeta(BaseModel):
    previous: Optional[str] = None
    next: Optional[str] = None


class Page(BaseModel, Generic[T]):
    """Cursor page: {items, meta: {previous, next}}."""

    items: List[T]
    meta: PageMeta

    @classmethod
    def create(cls, items: List[T], ids: List[str], limit: int) -> "Page[T]":
        # previous is the first id, next is the last id only when the page is full
        previous = ids[0] if ids else None
        next_ = ids[-1] if ids and len(ids) == limit else None
        return cls(items=items, meta=PageMeta(previous=previous, next=next_))


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    code: str = Field(description="Stable machine readable error code")
    message: Optional[str] = Field(default=None, description="Human-readable error message")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "folder_not_found",
                "message": "The folder does not exist.",
            }
        }
    )


class HealthResponse(BaseModel):
    ok: bool = True


class DatabaseHealthResponse(CamelModel):
    connected: bool
    status: str
    response_time_ms: Optional[float] = None
    error: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"connected": True, "status": "healthy", "responseTimeMs": 1.2}
        }
    )


def error_responses(*statuses: int) -> dict[int, dict[str, Any]]:
    """OpenAPI `responses` entries documenting ErrorResponse bodies."""
    return {code: {"model": ErrorResponse} for code in statuses}
