"""
Realtime Domain Layer
=====================

Contains:
- Event schemas: tagged frames for both directions of the channel
- Entities: Session, PresenceSignal
"""

from supportdesk.realtime.domain.entities import Session, PresenceSignal, SendCallable
from supportdesk.realtime.domain.events import (
    EventModel,
    MessagePayload,
    NewMessageEvent,
    StatusChangedEvent,
    TypingEvent,
    TicketCreatedEvent,
    ErrorEvent,
    JoinTicketCommand,
    LeaveTicketCommand,
    TypingCommand,
    parse_client_command,
    parse_server_event,
)

__all__ = [
    "Session",
    "PresenceSignal",
    "SendCallable",
    "EventModel",
    "MessagePayload",
    "NewMessageEvent",
    "StatusChangedEvent",
    "TypingEvent",
    "TicketCreatedEvent",
    "ErrorEvent",
    "JoinTicketCommand",
    "LeaveTicketCommand",
    "TypingCommand",
    "parse_client_command",
    "parse_server_event",
]
