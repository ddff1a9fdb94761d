import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Dict, List, Optional, Protocol, Sequence, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from portal.core.settings import settings
from portal.shared.exceptions import BackingStoreUnavailableError, QueryValidationError
from portal.shared.pagination.models import (
    ListQueryConfig,
    PageResult,
    PaginationMetadata,
    QueryParameters,
    SearchMode,
    SortOrder,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures of the store round trip that a caller may retry
STORE_UNAVAILABLE_ERRORS = (asyncio.TimeoutError, OSError, httpx.TransportError)


class ModelActions(Protocol):
    """The subset of Prisma model actions a paginated query needs."""

    async def count(self, *, where: Dict[str, Any]) -> int: ...

    async def find_many(
        self,
        *,
        where: Dict[str, Any],
        skip: int,
        take: int,
        order: List[Dict[str, str]],
    ) -> List[Any]: ...


def parse_query_parameters(**raw: Any) -> QueryParameters:
    """
    Validate raw list parameters (typically straight from a query string).

    Raises:
        QueryValidationError: If page/limit are non-numeric or not positive,
            or a filter value is not a scalar
    """
    try:
        return QueryParameters(**raw)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise QueryValidationError(f"Invalid query parameters: {errors}")


def build_search_clause(search: str, fields: Sequence[str]) -> Dict[str, Any]:
    conditions = [
        {field: {"contains": search, "mode": "insensitive"}} for field in fields
    ]
    if len(conditions) == 1:
        return conditions[0]
    return {"OR": conditions}


def build_where(
    params: QueryParameters,
    config: ListQueryConfig,
    scope: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build a Prisma where clause for a list query.

    ``scope`` is always AND-ed. Filters are equality constraints; the search is
    a case-insensitive substring match combined with them per ``search_mode``.
    """
    if config.filterable_fields is not None:
        unknown = sorted(set(params.filters) - config.filterable_fields)
        if unknown:
            raise QueryValidationError(f"Unknown filter field(s): {', '.join(unknown)}")

    filter_clause: Dict[str, Any] = dict(params.filters)
    search_clause = (
        build_search_clause(params.search, config.search_fields)
        if params.search
        else None
    )

    clauses: List[Dict[str, Any]] = []
    if search_clause and filter_clause and config.search_mode is SearchMode.OR:
        clauses.append({"OR": [filter_clause, search_clause]})
    else:
        if filter_clause:
            clauses.append(filter_clause)
        if search_clause:
            clauses.append(search_clause)

    where: Dict[str, Any] = dict(scope or {})
    if clauses:
        where["AND"] = clauses
    return where


def build_order(
    params: QueryParameters, config: ListQueryConfig
) -> List[Dict[str, str]]:
    """
    Ordering for the page slice, always ending with the tie-breaker field.

    Without ``sort_by`` the entity's default sort is used; a ``sort_order``
    given on its own replaces the direction of the first default key.
    """
    if params.sort_by:
        if (
            config.sortable_fields is not None
            and params.sort_by not in config.sortable_fields
        ):
            raise QueryValidationError(f"Cannot sort by '{params.sort_by}'")
        sort = [(params.sort_by, params.sort_order or SortOrder.DESC)]
    else:
        sort = list(config.default_sort)
        if sort and params.sort_order:
            sort[0] = (sort[0][0], params.sort_order)

    order = [{field: direction.value} for field, direction in sort]
    if config.tie_breaker not in {field for field, _ in sort}:
        order.append({config.tie_breaker: sort[0][1].value if sort else "asc"})
    return order


async def _bounded(call: Awaitable[T], timeout: Optional[float]) -> T:
    if timeout is None:
        return await call
    return await asyncio.wait_for(call, timeout=timeout)


async def paginate(
    collection: ModelActions,
    params: QueryParameters,
    config: ListQueryConfig,
    *,
    scope: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
) -> PageResult[Any]:
    """
    Return one page of records matching the query plus pagination metadata.

    The count and the slice are two separate reads, so ``total`` may be stale
    if records are written in between.

    Args:
        collection: Prisma model client (e.g. ``db.ticket``) or equivalent
        params: Validated query parameters
        config: Entity list policy
        scope: Equality constraints always applied (e.g. organisation id)
        timeout: Seconds allowed per store call, defaults to QUERY_TIMEOUT_SECONDS

    Returns:
        PageResult with the page items and pagination metadata

    Raises:
        QueryValidationError: If sort or filter fields are not allowed
        BackingStoreUnavailableError: If the store times out or is unreachable
    """
    where = build_where(params, config, scope)
    order = build_order(params, config)
    if timeout is None:
        timeout = settings.QUERY_TIMEOUT_SECONDS

    try:
        total = await _bounded(collection.count(where=where), timeout)
        items = await _bounded(
            collection.find_many(
                where=where, skip=params.skip, take=params.limit, order=order
            ),
            timeout,
        )
    except STORE_UNAVAILABLE_ERRORS as e:
        logger.error(
            f"List query failed against backing store: {type(e).__name__}: {e}"
        )
        raise BackingStoreUnavailableError(
            retry_after=settings.STORE_RETRY_AFTER_SECONDS
        ) from e

    return PageResult(
        items=list(items),
        pagination=PaginationMetadata.build(total, params.page, params.limit),
    )


def to_document(record: Any) -> Dict[str, Any]:
    """Convert a Prisma model, mapping or plain object to a plain dict."""
    if isinstance(record, BaseModel):
        return record.model_dump(mode="json")
    if isinstance(record, Mapping):
        return dict(record)
    return {k: v for k, v in vars(record).items() if not k.startswith("_")}


def with_filters(params: QueryParameters, **filters: Any) -> QueryParameters:
    """Return a copy of ``params`` with entity filters merged in and validated."""
    return parse_query_parameters(
        **params.model_dump(exclude={"filters"}),
        filters={**params.filters, **filters},
    )
