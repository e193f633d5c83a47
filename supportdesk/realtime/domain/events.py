"""
Realtime Event Schemas
======================

Wire schemas for the bidirectional event channel.

Every frame is a JSON object tagged by ``type``; each tag has a fixed
schema and unknown tags or extra fields are rejected at the boundary.
Field names are camelCase on the wire, snake_case in Python.
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from supportdesk.core import ValidationException


class EventModel(BaseModel):
    """Base for every frame exchanged over the event channel."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


# ========== Server -> Client ==========

class MessagePayload(EventModel):
    """Message as broadcast to room members."""
    id: str
    ticket_id: str
    sender_role: Literal["MERCHANT", "ADMIN", "SYSTEM"]
    sender_id: Optional[str] = None
    body: str
    created_at: datetime
    is_auto_generated: bool = False

    @classmethod
    def from_domain(cls, message: Any) -> "MessagePayload":
        return cls(
            id=message.id,
            ticket_id=message.ticket_id,
            sender_role=message.sender_role,
            sender_id=message.sender_id,
            body=message.body,
            created_at=message.created_at,
            is_auto_generated=message.is_auto_generated,
        )


class NewMessageEvent(EventModel):
    type: Literal["new_message"] = "new_message"
    message: MessagePayload


class StatusChangedEvent(EventModel):
    type: Literal["status_changed"] = "status_changed"
    ticket_id: str
    status: Literal["OPEN", "RESOLVED", "CLOSED"]
    updated_at: datetime


class TypingEvent(EventModel):
    type: Literal["typing"] = "typing"
    user_id: str
    ticket_id: str
    is_typing: bool
    role: Literal["MERCHANT", "ADMIN"]


class TicketCreatedEvent(EventModel):
    type: Literal["ticket:created"] = "ticket:created"
    ticket_id: str
    subject: str
    tenant_id: str


class ErrorEvent(EventModel):
    type: Literal["error"] = "error"
    code: str
    detail: str


ServerEvent = Annotated[
    Union[NewMessageEvent, StatusChangedEvent, TypingEvent, TicketCreatedEvent, ErrorEvent],
    Field(discriminator="type"),
]


# ========== Client -> Server ==========

class JoinTicketCommand(EventModel):
    type: Literal["join_ticket"]
    ticket_id: str = Field(min_length=1)


class LeaveTicketCommand(EventModel):
    type: Literal["leave_ticket"]
    ticket_id: str = Field(min_length=1)


class TypingCommand(EventModel):
    type: Literal["typing"]
    ticket_id: str = Field(min_length=1)
    is_typing: bool


ClientCommand = Annotated[
    Union[JoinTicketCommand, LeaveTicketCommand, TypingCommand],
    Field(discriminator="type"),
]

_client_command_adapter: TypeAdapter = TypeAdapter(ClientCommand)
_server_event_adapter: TypeAdapter = TypeAdapter(ServerEvent)


def _validate(adapter: TypeAdapter, raw: Any, kind: str):
    try:
        return adapter.validate_python(raw)
    except PydanticValidationError as e:
        raise ValidationException(
            f"Malformed {kind}",
            details={"errors": [
                {"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()
            ]},
        ) from e


def parse_client_command(raw: Any) -> Union[JoinTicketCommand, LeaveTicketCommand, TypingCommand]:
    """
    Validate an inbound frame.

    Raises:
        ValidationException: unknown ``type``, missing or extra fields
    """
    return _validate(_client_command_adapter, raw, "client event")


def parse_server_event(raw: Any):
    """Validate an outbound frame (used by clients and tests)."""
    return _validate(_server_event_adapter, raw, "server event")
