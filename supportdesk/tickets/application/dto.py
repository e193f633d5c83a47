"""
Ticket Application DTOs
=======================

Pydantic models for ticket API request/response handling.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from supportdesk.config import TicketPriority
from supportdesk.sla.domain import SLASnapshot
from supportdesk.tickets.domain import Message, Ticket


# ========== Request DTOs ==========

class CreateTicketRequest(BaseModel):
    """Request model for filing a ticket."""
    subject: str = Field(..., min_length=1, max_length=200, description="Ticket subject")
    message: str = Field(..., min_length=1, description="Opening message")
    priority: str = Field(default=TicketPriority.NORMAL, description="LOW, NORMAL, HIGH or URGENT")


class ReplyRequest(BaseModel):
    """Request model for posting a message to a ticket."""
    body: str = Field(..., description="Message text; surrounding whitespace is trimmed")


class StatusUpdateRequest(BaseModel):
    """Request model for an admin status change."""
    status: str = Field(..., description="RESOLVED or CLOSED")


# ========== Response DTOs ==========

class MessageResponse(BaseModel):
    id: str
    ticket_id: str
    sender_role: str
    sender_id: Optional[str] = None
    body: str
    created_at: datetime
    is_auto_generated: bool = False

    @classmethod
    def from_domain(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            ticket_id=message.ticket_id,
            sender_role=message.sender_role,
            sender_id=message.sender_id,
            body=message.body,
            created_at=message.created_at,
            is_auto_generated=message.is_auto_generated,
        )


class TicketSummaryResponse(BaseModel):
    """List row, with SLA fields computed at read time."""
    id: str
    subject: str
    tenant_id: str
    tenant_name: str
    status: str
    priority: str
    created_at: datetime
    updated_at: datetime
    message_count: int = 0
    is_overdue: bool = False
    sla_remaining_hours: Optional[int] = None

    @classmethod
    def from_domain(cls, ticket: Ticket, sla: SLASnapshot) -> "TicketSummaryResponse":
        return cls(
            id=ticket.id,
            subject=ticket.subject,
            tenant_id=ticket.tenant_id,
            tenant_name=ticket.tenant_name,
            status=ticket.status,
            priority=ticket.priority,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
            message_count=(
                ticket.message_count
                if ticket.message_count is not None
                else len(ticket.messages)
            ),
            is_overdue=sla.is_overdue,
            sla_remaining_hours=sla.remaining_hours,
        )


class TicketDetailResponse(TicketSummaryResponse):
    messages: List[MessageResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, ticket: Ticket, sla: SLASnapshot) -> "TicketDetailResponse":
        summary = TicketSummaryResponse.from_domain(ticket, sla)
        return cls(
            **summary.model_dump(),
            messages=[MessageResponse.from_domain(m) for m in ticket.ordered_messages],
        )
