# apps/api/portal/domains/tickets/models.py
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from portal.shared.pagination import ListResponse


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TicketCreate(BaseModel):
    """Request model for creating a ticket"""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = TicketPriority.MEDIUM
    category: Optional[str] = None
    assignedTo: Optional[str] = None
    customerId: Optional[str] = None
    customerEmail: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


NON_NULLABLE_FIELDS = frozenset({"title", "description", "status", "priority", "tags"})


class TicketUpdate(BaseModel):
    """Request model for updating a ticket; only provided fields change"""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    category: Optional[str] = None
    assignedTo: Optional[str] = None
    customerId: Optional[str] = None
    customerEmail: Optional[str] = None
    tags: Optional[List[str]] = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "TicketUpdate":
        nulled = sorted(
            name
            for name in self.model_fields_set & NON_NULLABLE_FIELDS
            if getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"Fields cannot be set to null: {', '.join(nulled)}")
        return self


class TicketResponse(BaseModel):
    """Response model for ticket data"""

    id: str
    orgId: str
    title: str
    description: str
    status: TicketStatus
    priority: TicketPriority
    category: Optional[str] = None
    assignedTo: Optional[str] = None
    customerId: Optional[str] = None
    customerEmail: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_prisma(cls, ticket: Any) -> "TicketResponse":
        return cls(
            id=ticket.id,
            orgId=ticket.orgId,
            title=ticket.title,
            description=ticket.description,
            status=ticket.status,
            priority=ticket.priority,
            category=ticket.category,
            assignedTo=ticket.assignedTo,
            customerId=ticket.customerId,
            customerEmail=ticket.customerEmail,
            tags=list(ticket.tags or []),
            createdAt=ticket.createdAt,
            updatedAt=ticket.updatedAt,
        )


TicketListResponse = ListResponse[TicketResponse]
