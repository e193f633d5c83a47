"""
Realtime Gateway
================

Connection lifecycle and inbound frame dispatch for the event channel.

Transport-agnostic: the WebSocket endpoint hands frames in as parsed JSON
and provides a ``send`` coroutine; tests do the same with in-memory lists.
"""

from typing import Any, Awaitable, Callable, Optional

from supportdesk.core import (
    ApplicationException,
    ValidationException,
    ResourceNotFoundException,
    UnauthorizedException,
    ForbiddenException,
    TransientIOException,
)
from supportdesk.realtime.application.services import (
    SessionRegistry, RoomBroker, PresenceTracker
)
from supportdesk.realtime.domain import (
    Session,
    SendCallable,
    ErrorEvent,
    JoinTicketCommand,
    LeaveTicketCommand,
    TypingCommand,
    parse_client_command,
)
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.tickets.domain import Actor, Ticket

logger = get_logger(__name__)

TicketLookup = Callable[[str], Awaitable[Optional[Ticket]]]

ERROR_CODES = (
    (ValidationException, "validation_error"),
    (ResourceNotFoundException, "not_found"),
    (UnauthorizedException, "unauthorized"),
    (ForbiddenException, "forbidden"),
    (TransientIOException, "unavailable"),
)


def error_code_for(exc: ApplicationException) -> str:
    for exc_type, code in ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    return "error"


class RealtimeGateway:
    """
    Binds connections to the registry and routes client commands.

    Rejected commands are answered with an ``error`` frame to the
    originating session only; the connection stays open.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        broker: RoomBroker,
        presence: PresenceTracker,
        ticket_lookup: TicketLookup,
    ):
        self._registry = registry
        self._broker = broker
        self._presence = presence
        self._ticket_lookup = ticket_lookup

    def connect(self, connection_id: str, actor: Actor, send: SendCallable) -> Session:
        session = Session(connection_id=connection_id, actor=actor, send=send)
        self._registry.register(session)
        return session

    def disconnect(self, connection_id: str) -> None:
        """
        Drop a connection from every room.

        In-flight writes started by this session are not cancelled; their
        broadcasts simply have one fewer recipient.
        """
        session = self._registry.get(connection_id)
        if session is None:
            return
        self._registry.unregister(connection_id)
        if not self._registry.sessions_for_actor(session.actor.id):
            self._presence.clear_actor(session.actor.id)

    async def join_ticket(self, session: Session, ticket_id: str) -> Ticket:
        """
        Raises:
            ResourceNotFoundException: unknown ticket
            UnauthorizedException: ticket outside the actor's tenant
        """
        ticket = await self._ticket_lookup(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        self._registry.join(session, ticket)
        logger.info(
            "Joined ticket room",
            extra={
                "connection_id": session.connection_id,
                "actor_id": session.actor.id,
                "ticket_id": ticket_id
            }
        )
        return ticket

    def leave_ticket(self, session: Session, ticket_id: str) -> None:
        self._registry.leave(session, ticket_id)

    async def handle_frame(self, session: Session, raw: Any) -> None:
        try:
            command = parse_client_command(raw)

            if isinstance(command, JoinTicketCommand):
                await self.join_ticket(session, command.ticket_id)
            elif isinstance(command, LeaveTicketCommand):
                self.leave_ticket(session, command.ticket_id)
            elif isinstance(command, TypingCommand):
                await self._presence.set_typing(
                    command.ticket_id, session.actor, command.is_typing
                )
        except ApplicationException as e:
            logger.info(
                "Client frame rejected",
                extra={
                    "connection_id": session.connection_id,
                    "error_type": type(e).__name__,
                    "error_message": e.message
                }
            )
            await self._broker.send_to(
                session, ErrorEvent(code=error_code_for(e), detail=e.message)
            )
