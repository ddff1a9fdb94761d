import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from portal.core.settings import settings

T = TypeVar("T")

DEFAULT_PAGE = 1

FilterValue = str | int | float | bool


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SearchMode(str, Enum):
    """How a text search combines with the structured filters of a query."""

    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class ListQueryConfig:
    """
    Per-entity list policy.

    Attributes:
        search_fields: Fields matched by ``search``; the primary text field first.
            Several fields are OR-ed together.
        default_sort: Ordered (field, order) pairs used when no ``sort_by`` is given
        tie_breaker: Unique field appended to every ordering for stable paging
        search_mode: Whether search is AND-ed or OR-ed with the filters
        sortable_fields: Allowed ``sort_by`` values (None allows any field)
        filterable_fields: Allowed filter keys (None allows any field)
    """

    search_fields: Tuple[str, ...]
    default_sort: Tuple[Tuple[str, SortOrder], ...] = (("createdAt", SortOrder.DESC),)
    tie_breaker: str = "id"
    search_mode: SearchMode = SearchMode.AND
    sortable_fields: Optional[FrozenSet[str]] = None
    filterable_fields: Optional[FrozenSet[str]] = field(default=None)

    @property
    def primary_text_field(self) -> str:
        return self.search_fields[0]


class QueryParameters(BaseModel):
    """Validated input of a paginated list query."""

    model_config = ConfigDict(frozen=True)

    page: int = DEFAULT_PAGE
    limit: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_LIMIT)
    search: Optional[str] = None
    filters: Dict[str, FilterValue] = Field(default_factory=dict)
    sort_by: Optional[str] = None
    sort_order: Optional[SortOrder] = None

    @field_validator("page")
    @classmethod
    def validate_page(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page must be a positive integer")
        return v

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("limit must be a positive integer")
        if v > settings.MAX_PAGE_LIMIT:
            raise ValueError(f"limit must not exceed {settings.MAX_PAGE_LIMIT}")
        return v

    @field_validator("search")
    @classmethod
    def normalize_search(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("filters", mode="before")
    @classmethod
    def drop_empty_filters(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {
                k: value
                for k, value in v.items()
                if value is not None and value != ""
            }
        return v

    @field_validator("sort_by")
    @classmethod
    def normalize_sort_by(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class PaginationMetadata(BaseModel):
    """Pagination metadata for list responses"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PaginationMetadata":
        total_pages = math.ceil(total / limit) if total > 0 else 0
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


@dataclass
class PageResult(Generic[T]):
    """One page of records plus its pagination metadata."""

    items: List[T]
    pagination: PaginationMetadata


class ListResponse(BaseModel, Generic[T]):
    """Wire shape of every list endpoint."""

    success: bool = True
    data: List[T]
    pagination: PaginationMetadata
