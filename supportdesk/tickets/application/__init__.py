"""
Ticket Application Layer
========================

Contains:
- TicketService: ticket operations with ordered broadcast
- ITicketStore: ticket store interface
- Actor authentication from gateway headers
- DTOs for the HTTP API
"""

from supportdesk.tickets.application.services import ITicketStore, TicketService
from supportdesk.tickets.application.auth import (
    IActorAuthenticator,
    HeaderActorAuthenticator,
)
from supportdesk.tickets.application.dto import (
    CreateTicketRequest,
    ReplyRequest,
    StatusUpdateRequest,
    MessageResponse,
    TicketSummaryResponse,
    TicketDetailResponse,
)

__all__ = [
    "ITicketStore",
    "TicketService",
    "IActorAuthenticator",
    "HeaderActorAuthenticator",
    # DTOs
    "CreateTicketRequest",
    "ReplyRequest",
    "StatusUpdateRequest",
    "MessageResponse",
    "TicketSummaryResponse",
    "TicketDetailResponse",
]
