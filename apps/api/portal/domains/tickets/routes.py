# apps/api/portal/domains/tickets/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from portal.core.database import Database, get_db
from portal.domains.tickets.models import (
    TicketCreate,
    TicketListResponse,
    TicketPriority,
    TicketResponse,
    TicketStatus,
    TicketUpdate,
)
from portal.domains.tickets.service import (
    create_ticket,
    delete_ticket,
    get_ticket,
    get_tickets_by_organization,
    parse_choice_filter,
    update_ticket,
)
from portal.shared.pagination import QueryParameters, get_query_parameters
from portal.shared.permissions import MemberContext, Permission, require_permission

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get(
    "/{org_id}",
    response_model=TicketListResponse,
    operation_id="getTickets",
)
async def get_tickets(
    org_id: str,
    params: QueryParameters = Depends(get_query_parameters),
    status: Optional[str] = Query(None, description="Filter by ticket status"),
    priority: Optional[str] = Query(None, description="Filter by ticket priority"),
    assigned_to: Optional[str] = Query(
        None, alias="assignedTo", description="Filter by assignee user ID"
    ),
    context: MemberContext = Depends(require_permission(Permission.VIEW_TICKETS)),
    db: Database = Depends(get_db),
) -> TicketListResponse:
    """
    Get tickets for an organisation with filtering, search and pagination

    Search matches the ticket title. Results are newest first unless
    ``sortBy`` is given.
    """
    return await get_tickets_by_organization(
        organization_id=org_id,
        db=db,
        params=params,
        status=parse_choice_filter("status", status, TicketStatus),
        priority=parse_choice_filter("priority", priority, TicketPriority),
        assigned_to=assigned_to,
    )


@router.post(
    "/{org_id}",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    operation_id="createTicket",
)
async def create_ticket_route(
    org_id: str,
    ticket_data: TicketCreate,
    context: MemberContext = Depends(require_permission(Permission.CREATE_TICKETS)),
    db: Database = Depends(get_db),
) -> TicketResponse:
    return await create_ticket(org_id, ticket_data, db)


@router.get(
    "/{org_id}/{ticket_id}",
    response_model=TicketResponse,
    operation_id="getTicket",
)
async def get_ticket_route(
    org_id: str,
    ticket_id: str,
    context: MemberContext = Depends(require_permission(Permission.VIEW_TICKETS)),
    db: Database = Depends(get_db),
) -> TicketResponse:
    return await get_ticket(org_id, ticket_id, db)


@router.patch(
    "/{org_id}/{ticket_id}",
    response_model=TicketResponse,
    operation_id="updateTicket",
)
async def update_ticket_route(
    org_id: str,
    ticket_id: str,
    updates: TicketUpdate,
    context: MemberContext = Depends(require_permission(Permission.EDIT_TICKETS)),
    db: Database = Depends(get_db),
) -> TicketResponse:
    """
    Update a ticket.

    Only the fields present in the request body are changed.
    """
    return await update_ticket(org_id, ticket_id, updates, db)


@router.delete(
    "/{org_id}/{ticket_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    operation_id="deleteTicket",
)
async def delete_ticket_route(
    org_id: str,
    ticket_id: str,
    context: MemberContext = Depends(require_permission(Permission.DELETE_TICKETS)),
    db: Database = Depends(get_db),
) -> Response:
    await delete_ticket(org_id, ticket_id, db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
