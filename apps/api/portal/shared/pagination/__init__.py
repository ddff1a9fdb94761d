"""
Shared paginated list queries.

Every list endpoint resolves its query through ``paginate`` so that search,
filtering, ordering and pagination metadata behave the same for all entities.

Usage:
    from portal.shared.pagination import ListQueryConfig, paginate

    TICKET_LIST = ListQueryConfig(search_fields=("title",))

    result = await paginate(db.ticket, params, TICKET_LIST, scope={"orgId": org_id})
"""

from .models import (
    ListQueryConfig,
    ListResponse,
    PageResult,
    PaginationMetadata,
    QueryParameters,
    SearchMode,
    SortOrder,
)
from .dependencies import get_query_parameters
from .service import (
    build_order,
    build_where,
    paginate,
    parse_query_parameters,
    to_document,
    with_filters,
)

__all__ = [
    "ListQueryConfig",
    "ListResponse",
    "PageResult",
    "PaginationMetadata",
    "QueryParameters",
    "SearchMode",
    "SortOrder",
    "build_order",
    "build_where",
    "paginate",
    "parse_query_parameters",
    "to_document",
    "with_filters",
    "get_query_parameters",
]
