"""
Ticket Controllers (API Routes)
===============================

FastAPI routes for ticket operations.

Controllers are thin - they delegate to TicketService. Domain errors are
turned into HTTP responses by the shared exception handlers.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse

from supportdesk.engine import SupportEngine
from supportdesk.shared.api.dependencies import get_support_engine, get_current_actor
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.tickets.application import (
    CreateTicketRequest,
    ReplyRequest,
    StatusUpdateRequest,
    MessageResponse,
    TicketSummaryResponse,
    TicketDetailResponse,
)
from supportdesk.tickets.domain import Actor

logger = get_logger(__name__)
router = APIRouter(prefix="/tickets", tags=["Tickets"])


# ========== Route Handlers ==========

@router.get(
    "",
    response_model=List[TicketSummaryResponse],
    summary="List tickets",
    description="""
    Tickets ordered by most recent activity.

    Merchants only see their own tenant's tickets; admins see all and may
    filter by `tenant_id`. SLA fields are computed at read time.
    """
)
async def list_tickets(
    status_filter: Optional[str] = Query(None, alias="status", description="OPEN, RESOLVED or CLOSED"),
    tenant_id: Optional[str] = Query(None, description="Admin-only tenant filter"),
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> List[TicketSummaryResponse]:
    tickets = await engine.tickets.list_tickets(actor, status=status_filter, tenant_id=tenant_id)
    return [
        TicketSummaryResponse.from_domain(t, engine.tickets.sla_snapshot(t))
        for t in tickets
    ]


@router.post(
    "",
    response_model=TicketDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="File a ticket",
)
async def create_ticket(
    request: CreateTicketRequest,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> TicketDetailResponse:
    ticket = await engine.tickets.create_ticket(
        actor,
        subject=request.subject,
        message=request.message,
        priority=request.priority,
    )
    return TicketDetailResponse.from_domain(ticket, engine.tickets.sla_snapshot(ticket))


@router.get(
    "/{ticket_id}",
    response_model=TicketDetailResponse,
    summary="Ticket detail with timeline",
)
async def get_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> TicketDetailResponse:
    ticket = await engine.tickets.get_ticket(actor, ticket_id)
    return TicketDetailResponse.from_domain(ticket, engine.tickets.sla_snapshot(ticket))


@router.post(
    "/{ticket_id}/reply",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a message",
    description="""
    Append a message and broadcast it to everyone in the ticket room,
    including the sender's other connections.

    A merchant message may trigger the automated acknowledgment.
    """
)
async def reply_to_ticket(
    ticket_id: str,
    request: ReplyRequest,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> MessageResponse:
    message = await engine.tickets.submit_message(ticket_id, actor, request.body)
    return MessageResponse.from_domain(message)


@router.put(
    "/{ticket_id}/status",
    response_model=TicketSummaryResponse,
    summary="Change ticket status (admin)",
)
async def update_status(
    ticket_id: str,
    request: StatusUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> TicketSummaryResponse:
    ticket = await engine.tickets.set_status(ticket_id, actor, request.status)
    return TicketSummaryResponse.from_domain(ticket, engine.tickets.sla_snapshot(ticket))


@router.get(
    "/{ticket_id}/transcript",
    response_class=PlainTextResponse,
    summary="Export transcript as plain text",
)
async def export_transcript(
    ticket_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> PlainTextResponse:
    text = await engine.tickets.export_transcript(actor, ticket_id)
    return PlainTextResponse(
        text,
        headers={"Content-Disposition": f'attachment; filename="ticket-{ticket_id[:8]}.txt"'},
    )
