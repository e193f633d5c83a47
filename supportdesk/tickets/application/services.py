"""
Ticket Application Services
===========================

Application services orchestrate the ticket store, the room broker and
the auto-reply path for every ticket operation.

Following SOLID principles:
- Single Responsibility: TicketService owns ticket operations; fan-out and
  cooldown live in their own services
- Dependency Inversion: Depend on ITicketStore, not a concrete database
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from supportdesk.autoreply.application import AutoReplyService
from supportdesk.config import (
    SenderRole, TicketStatus, TicketPriority,
    SETTABLE_STATUSES, VALID_PRIORITIES, VALID_STATUSES
)
from supportdesk.core import (
    ValidationException,
    ResourceNotFoundException,
    UnauthorizedException,
    ForbiddenException,
)
from supportdesk.realtime.application import RoomBroker
from supportdesk.realtime.domain import (
    NewMessageEvent, MessagePayload, StatusChangedEvent, TicketCreatedEvent
)
from supportdesk.shared.infrastructure.logging import get_logger, log_latency
from supportdesk.sla.domain import SLASnapshot
from supportdesk.tickets.domain import Actor, Message, Ticket, TranscriptFormatter

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ========== Store Interface (Dependency Inversion) ==========

class ITicketStore(ABC):
    """
    Durable record of tickets and their message timelines.

    Implementations raise TransientIOException when unreachable.
    """

    @abstractmethod
    async def get_ticket(self, ticket_id: str, include_messages: bool = True) -> Optional[Ticket]:
        """Get a ticket, with its ordered messages unless told otherwise."""

    @abstractmethod
    async def list_tickets(
        self,
        tenant_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Ticket]:
        """List tickets (newest activity first) with message_count set."""

    @abstractmethod
    async def create_ticket(self, ticket: Ticket, first_message: Message) -> Ticket:
        """Persist a new ticket together with its opening message."""

    @abstractmethod
    async def append_message(self, message: Message) -> Message:
        """
        Append to a ticket's timeline and touch its updated_at.

        Returns the stored message with its sequence number assigned.
        """

    @abstractmethod
    async def update_status(self, ticket_id: str, status: str, updated_at: datetime) -> Ticket:
        """Write a new status and updated_at."""


# ========== Application Services ==========

class TicketService:
    """
    Ticket operations for merchants and admins.

    Every store write that is broadcast happens while holding the ticket's
    room lock, so subscribers see events in commit order.
    """

    def __init__(
        self,
        store: ITicketStore,
        broker: RoomBroker,
        auto_reply: Optional[AutoReplyService] = None,
        sla_hours: float = 24,
        clock: Clock = _utc_now,
    ):
        self._store = store
        self._broker = broker
        self._auto_reply = auto_reply
        self._sla_hours = sla_hours
        self._clock = clock

    # ----- reads -----

    async def lookup(self, ticket_id: str) -> Optional[Ticket]:
        """Unscoped lookup used for room authorization."""
        return await self._store.get_ticket(ticket_id, include_messages=False)

    async def list_tickets(
        self,
        actor: Actor,
        status: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ) -> List[Ticket]:
        """
        Admins may filter by any tenant; merchants are pinned to their own.
        """
        if status is not None and status not in VALID_STATUSES:
            raise ValidationException(f"Unknown status: {status}")
        if not actor.is_admin:
            tenant_id = actor.tenant_id
        return await self._store.list_tickets(tenant_id=tenant_id, status=status)

    async def get_ticket(self, actor: Actor, ticket_id: str) -> Ticket:
        """
        Full ticket with timeline.

        Merchants get NotFound for other tenants' tickets so existence
        does not leak across tenants.
        """
        ticket = await self._store.get_ticket(ticket_id)
        if ticket is None or not actor.can_access(ticket):
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def export_transcript(self, actor: Actor, ticket_id: str) -> str:
        ticket = await self.get_ticket(actor, ticket_id)
        return TranscriptFormatter.format(ticket)

    def sla_snapshot(self, ticket: Ticket, now: Optional[datetime] = None) -> SLASnapshot:
        return SLASnapshot.for_ticket(ticket, self._sla_hours, now or self._clock())

    # ----- writes -----

    async def create_ticket(
        self,
        actor: Actor,
        subject: str,
        message: str,
        priority: str = TicketPriority.NORMAL,
    ) -> Ticket:
        """
        File a new ticket on behalf of a merchant.

        Raises:
            ForbiddenException: actor is not a merchant
            ValidationException: empty subject/message or unknown priority
        """
        if actor.is_admin:
            raise ForbiddenException("file tickets", actor.role)

        subject = (subject or "").strip()
        body = (message or "").strip()
        if not subject:
            raise ValidationException("Ticket subject cannot be empty")
        if not body:
            raise ValidationException("Message body cannot be empty")
        if priority not in VALID_PRIORITIES:
            raise ValidationException(f"Unknown priority: {priority}")

        now = self._clock()
        ticket_id = str(uuid4())
        ticket = Ticket(
            id=ticket_id,
            subject=subject,
            tenant_id=actor.tenant_id,
            tenant_name=actor.tenant_name,
            status=TicketStatus.OPEN,
            priority=priority,
            created_at=now,
            updated_at=now,
        )
        first = Message(
            id=str(uuid4()),
            ticket_id=ticket_id,
            sender_role=SenderRole.MERCHANT,
            sender_id=actor.id,
            body=body,
            created_at=now,
        )

        with log_latency(logger, "create_ticket", ticket_id=ticket_id):
            created = await self._store.create_ticket(ticket, first)
        logger.info(
            "Ticket created",
            extra={"ticket_id": ticket_id, "tenant_id": actor.tenant_id}
        )

        await self._broker.publish_to_admins(TicketCreatedEvent(
            ticket_id=created.id,
            subject=created.subject,
            tenant_id=created.tenant_id,
        ))

        opening = created.messages[0] if created.messages else first
        await self._run_auto_reply(created, opening)
        return created

    async def submit_message(self, ticket_id: str, actor: Actor, body: str) -> Message:
        """
        Append a reply to a ticket and broadcast it to the room.

        Raises:
            ValidationException: body empty after trimming
            ResourceNotFoundException: unknown ticket
            UnauthorizedException: merchant writing to another tenant's ticket
            TransientIOException: store unreachable (not retried)
        """
        text = (body or "").strip()
        if not text:
            raise ValidationException("Message body cannot be empty")

        ticket = await self._store.get_ticket(ticket_id, include_messages=False)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        if not actor.can_access(ticket):
            raise UnauthorizedException(
                f"Actor {actor.id} may not write to ticket {ticket_id}",
                details={"ticket_id": ticket_id}
            )

        message = await self._commit_message(
            ticket,
            sender_role=actor.sender_role,
            sender_id=actor.id,
            body=text,
        )

        if message.sender_role != SenderRole.ADMIN:
            await self._run_auto_reply(ticket, message)
        return message

    async def set_status(self, ticket_id: str, actor: Actor, new_status: str) -> Ticket:
        """
        Move a ticket to RESOLVED or CLOSED.

        Setting the current status again is a silent no-op: no write and
        no broadcast.

        Raises:
            ForbiddenException: actor is not an admin
            ValidationException: OPEN target, unknown status, or backward move
            ResourceNotFoundException: unknown ticket
        """
        if not actor.is_admin:
            raise ForbiddenException("change ticket status", actor.role)
        if new_status not in SETTABLE_STATUSES:
            raise ValidationException(
                f"Status must be one of {SETTABLE_STATUSES}, got {new_status}"
            )

        async with self._broker.room_lock(ticket_id):
            ticket = await self._store.get_ticket(ticket_id, include_messages=False)
            if ticket is None:
                raise ResourceNotFoundException("Ticket", ticket_id)
            if ticket.status == new_status:
                return ticket
            if not ticket.can_transition_to(new_status):
                raise ValidationException(
                    f"Ticket {ticket_id} cannot move from {ticket.status} to {new_status}"
                )

            with log_latency(logger, "update_status", ticket_id=ticket_id):
                updated = await self._store.update_status(ticket_id, new_status, self._clock())

            await self._broker.publish(ticket_id, StatusChangedEvent(
                ticket_id=ticket_id,
                status=updated.status,
                updated_at=updated.updated_at,
            ))

        logger.info(
            "Ticket status changed",
            extra={"ticket_id": ticket_id, "status": new_status, "actor_id": actor.id}
        )
        return updated

    # ----- internals -----

    async def _commit_message(
        self,
        ticket: Ticket,
        sender_role: str,
        body: str,
        sender_id: Optional[str] = None,
        is_auto_generated: bool = False,
    ) -> Message:
        async with self._broker.room_lock(ticket.id):
            draft = Message(
                id=str(uuid4()),
                ticket_id=ticket.id,
                sender_role=sender_role,
                sender_id=sender_id,
                body=body,
                created_at=self._clock(),
                is_auto_generated=is_auto_generated,
            )
            with log_latency(logger, "append_message", ticket_id=ticket.id):
                message = await self._store.append_message(draft)

            await self._broker.publish(
                ticket.id, NewMessageEvent(message=MessagePayload.from_domain(message))
            )
        return message

    async def _post_auto_reply(self, ticket: Ticket, body: str) -> Message:
        """Persistence + broadcast path for automated messages; never re-enters the throttle."""
        return await self._commit_message(
            ticket,
            sender_role=SenderRole.SYSTEM,
            body=body,
            is_auto_generated=True,
        )

    async def _run_auto_reply(self, ticket: Ticket, message: Message) -> None:
        if self._auto_reply is None:
            return
        try:
            await self._auto_reply.maybe_reply(ticket, message, self._post_auto_reply)
        except Exception as e:
            # The triggering message is already committed and broadcast
            logger.warning(
                "Auto-reply failed",
                extra={"ticket_id": ticket.id, "message_id": message.id, "error": str(e)}
            )
