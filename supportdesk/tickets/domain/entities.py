"""
Ticket Domain Entities
======================

Pure Python domain entities for support tickets.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List

from supportdesk.config import (
    ActorRole, SenderRole, TicketStatus, TicketPriority, STATUS_ORDER
)


@dataclass(frozen=True)
class Actor:
    """
    Authenticated identity behind a request or connection.

    Supplied by the authentication layer; merchants always carry the
    tenant they belong to, admins carry none.
    """
    id: str
    role: ActorRole
    display_name: str = ""
    tenant_id: Optional[str] = None
    tenant_name: str = ""

    def __post_init__(self):
        if self.role not in (ActorRole.MERCHANT, ActorRole.ADMIN):
            raise ValueError(f"Unknown actor role: {self.role}")
        if self.role == ActorRole.MERCHANT and not self.tenant_id:
            raise ValueError("Merchant actors require a tenant_id")

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    @property
    def sender_role(self) -> SenderRole:
        """Role recorded on messages this actor writes."""
        return SenderRole.ADMIN if self.is_admin else SenderRole.MERCHANT

    def can_access(self, ticket: "Ticket") -> bool:
        """Admins reach every ticket; merchants only their own tenant's."""
        return self.is_admin or ticket.tenant_id == self.tenant_id


@dataclass(frozen=True)
class Message:
    """
    A single entry in a ticket's timeline.

    Immutable once created. ``seq`` is the insertion order within the
    ticket and breaks ties between equal timestamps.
    """
    id: str
    ticket_id: str
    sender_role: SenderRole
    body: str
    created_at: datetime
    sender_id: Optional[str] = None
    is_auto_generated: bool = False
    seq: int = 0

    @property
    def sort_key(self) -> tuple:
        return (self.created_at, self.seq)


@dataclass
class Ticket:
    """
    Support ticket entity with its ordered message timeline.
    """

    id: str
    subject: str
    tenant_id: str
    status: TicketStatus
    created_at: datetime
    updated_at: datetime
    tenant_name: str = ""
    priority: TicketPriority = TicketPriority.NORMAL
    messages: List[Message] = field(default_factory=list)
    message_count: Optional[int] = None

    def __post_init__(self):
        """Validate ticket on initialization."""
        if self.updated_at < self.created_at:
            raise ValueError("updated_at cannot be before created_at")
        if self.status not in STATUS_ORDER:
            raise ValueError(f"Unknown ticket status: {self.status}")

    @property
    def is_open(self) -> bool:
        return self.status == TicketStatus.OPEN

    @property
    def short_id(self) -> str:
        """First 8 characters of the identifier, as shown to merchants."""
        return self.id[:8]

    @property
    def ordered_messages(self) -> List[Message]:
        return sorted(self.messages, key=lambda m: m.sort_key)

    def can_transition_to(self, new_status: TicketStatus) -> bool:
        """Status only moves forward: OPEN -> RESOLVED -> CLOSED."""
        return STATUS_ORDER[new_status] >= STATUS_ORDER[self.status]


class TranscriptFormatter:
    """
    Flat-text projection of a ticket and its timeline.

    One header block, then one line per message in timeline order.
    """

    TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def format(cls, ticket: Ticket) -> str:
        lines = [
            f"Ticket: {ticket.id}",
            f"Subject: {ticket.subject}",
            f"Merchant: {ticket.tenant_name or ticket.tenant_id}",
            f"Status: {ticket.status}",
            f"Created: {ticket.created_at.strftime(cls.TIMESTAMP_FORMAT)}",
            "",
        ]
        for message in ticket.ordered_messages:
            label = message.sender_role
            if message.is_auto_generated:
                label += " (auto)"
            stamp = message.created_at.strftime(cls.TIMESTAMP_FORMAT)
            lines.append(f"[{stamp}] {label}: {message.body}")
        return "\n".join(lines) + "\n"
