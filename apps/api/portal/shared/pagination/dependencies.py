from typing import Optional

from fastapi import Query

from .models import QueryParameters
from .service import parse_query_parameters


def get_query_parameters(
    page: Optional[str] = Query(None, description="Page number (1-based)"),
    limit: Optional[str] = Query(None, description="Number of records per page"),
    search: Optional[str] = Query(
        None, description="Case-insensitive substring search on the entity's text field"
    ),
    sort_by: Optional[str] = Query(
        None, alias="sortBy", description="Field to sort by"
    ),
    sort_order: Optional[str] = Query(
        None, alias="sortOrder", description="Sort direction: asc or desc"
    ),
) -> QueryParameters:
    """
    Common list query parameters.

    Values are taken as raw strings so malformed input is reported as a
    QueryValidationError (400) in the standard error body.
    """
    raw = {
        "page": page,
        "limit": limit,
        "search": search,
        "sort_by": sort_by,
        "sort_order": sort_order,
    }
    return parse_query_parameters(**{k: v for k, v in raw.items() if v is not None})
