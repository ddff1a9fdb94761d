# apps/api/portal/domains/tickets/service.py
import logging
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from portal.core.database import Database, is_object_id
from portal.shared.exceptions import QueryValidationError, ResourceNotFoundError
from portal.shared.pagination import (
    ListQueryConfig,
    QueryParameters,
    paginate,
    with_filters,
)

from .models import (
    TicketCreate,
    TicketListResponse,
    TicketPriority,
    TicketResponse,
    TicketStatus,
    TicketUpdate,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

TICKET_LIST = ListQueryConfig(
    search_fields=("title",),
    sortable_fields=frozenset(
        {"createdAt", "updatedAt", "priority", "status", "title"}
    ),
    filterable_fields=frozenset({"status", "priority", "assignedTo"}),
)


def parse_choice_filter(name: str, raw: Optional[str], choices: Type[E]) -> Optional[E]:
    """
    Read an enumerated filter (e.g. ``status=open``) from a query string.

    Raises:
        QueryValidationError: If the value is not one of ``choices``
    """
    if raw is None or raw == "":
        return None
    try:
        return choices(raw)
    except ValueError:
        allowed = ", ".join(c.value for c in choices)
        raise QueryValidationError(f"{name} must be one of: {allowed}")


async def get_tickets_by_organization(
    organization_id: str,
    db: Database,
    params: QueryParameters,
    status: Optional[TicketStatus] = None,
    priority: Optional[TicketPriority] = None,
    assigned_to: Optional[str] = None,
) -> TicketListResponse:
    """
    Get tickets for an organisation with filtering, search and pagination

    Args:
        organization_id: Organisation ID to scope the query to
        db: Prisma database connection
        params: Page, limit, search and sort parameters
        status: Filter by ticket status
        priority: Filter by ticket priority
        assigned_to: Filter by assignee user ID

    Returns:
        TicketListResponse with tickets and pagination metadata
    """
    params = with_filters(
        params,
        status=status.value if status else None,
        priority=priority.value if priority else None,
        assignedTo=assigned_to,
    )
    result = await paginate(
        db.ticket, params, TICKET_LIST, scope={"orgId": organization_id}
    )
    return TicketListResponse(
        data=[TicketResponse.from_prisma(t) for t in result.items],
        pagination=result.pagination,
    )


async def _get_ticket_record(
    organization_id: str, ticket_id: str, db: Database
) -> Any:
    if not is_object_id(ticket_id):
        raise ResourceNotFoundError("Ticket not found")
    ticket = await db.ticket.find_first(
        where={"id": ticket_id, "orgId": organization_id}
    )
    if not ticket:
        raise ResourceNotFoundError("Ticket not found")
    return ticket


async def get_ticket(
    organization_id: str, ticket_id: str, db: Database
) -> TicketResponse:
    ticket = await _get_ticket_record(organization_id, ticket_id, db)
    return TicketResponse.from_prisma(ticket)


async def create_ticket(
    organization_id: str, data: TicketCreate, db: Database
) -> TicketResponse:
    ticket = await db.ticket.create(
        data={"orgId": organization_id, **data.model_dump(mode="json")}
    )
    logger.info(f"Created ticket {ticket.id} in organisation {organization_id}")
    return TicketResponse.from_prisma(ticket)


async def update_ticket(
    organization_id: str, ticket_id: str, updates: TicketUpdate, db: Database
) -> TicketResponse:
    """
    Apply a partial update to a ticket.

    Raises:
        ResourceNotFoundError: If the ticket does not exist in the organisation
    """
    await _get_ticket_record(organization_id, ticket_id, db)
    changes = updates.model_dump(mode="json", exclude_unset=True)
    ticket = await db.ticket.update(where={"id": ticket_id}, data=changes)
    return TicketResponse.from_prisma(ticket)


async def delete_ticket(organization_id: str, ticket_id: str, db: Database) -> None:
    await _get_ticket_record(organization_id, ticket_id, db)
    await db.ticket.delete(where={"id": ticket_id})
    logger.info(f"Deleted ticket {ticket_id} from organisation {organization_id}")
