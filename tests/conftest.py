"""
Shared pytest fixtures.

Services are exercised against in-memory stores and a controllable clock;
WebSocket sessions are stood in for by coroutines that record frames.
"""

import itertools
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from supportdesk.autoreply.application import IConfigStore
from supportdesk.config import ActorRole, Settings
from supportdesk.core import ResourceNotFoundException, TransientIOException
from supportdesk.engine import build_support_engine
from supportdesk.tickets.application import ITicketStore
from supportdesk.tickets.domain import Actor, Message, Ticket

START = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now += timedelta(**delta)
        return self.now


class InMemoryTicketStore(ITicketStore):

    def __init__(self):
        self.tickets: Dict[str, Ticket] = {}
        self.messages: Dict[str, List[Message]] = {}
        self.status_writes = 0
        self.fail_appends = False

    async def get_ticket(self, ticket_id: str, include_messages: bool = True) -> Optional[Ticket]:
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            return None
        messages = list(self.messages[ticket_id]) if include_messages else []
        return replace(ticket, messages=messages, message_count=len(self.messages[ticket_id]))

    async def list_tickets(self, tenant_id=None, status=None) -> List[Ticket]:
        found = [
            replace(t, messages=[], message_count=len(self.messages[t.id]))
            for t in self.tickets.values()
            if (tenant_id is None or t.tenant_id == tenant_id)
            and (status is None or t.status == status)
        ]
        return sorted(found, key=lambda t: t.updated_at, reverse=True)

    async def create_ticket(self, ticket: Ticket, first_message: Message) -> Ticket:
        stored = replace(first_message, seq=1)
        self.tickets[ticket.id] = replace(ticket, messages=[])
        self.messages[ticket.id] = [stored]
        return replace(ticket, messages=[stored], message_count=1)

    async def append_message(self, message: Message) -> Message:
        if self.fail_appends:
            raise TransientIOException("store offline")
        if message.ticket_id not in self.tickets:
            raise ResourceNotFoundException("Ticket", message.ticket_id)
        stored = replace(message, seq=len(self.messages[message.ticket_id]) + 1)
        self.messages[message.ticket_id].append(stored)
        ticket = self.tickets[message.ticket_id]
        ticket.updated_at = max(ticket.updated_at, message.created_at)
        return stored

    async def update_status(self, ticket_id: str, status: str, updated_at: datetime) -> Ticket:
        ticket = self.tickets[ticket_id]
        ticket.status = status
        ticket.updated_at = max(ticket.updated_at, updated_at)
        self.status_writes += 1
        return replace(ticket, messages=[])

    def add_ticket(self, tenant_id: str, tenant_name: str = "", created_at: datetime = START,
                   ticket_id: Optional[str] = None, status: str = "OPEN") -> Ticket:
        """Seed a ticket directly, bypassing the service."""
        ticket_id = ticket_id or f"{tenant_id}-ticket-{len(self.tickets) + 1:04d}"
        ticket = Ticket(
            id=ticket_id,
            subject="Card reader offline",
            tenant_id=tenant_id,
            tenant_name=tenant_name,
            status=status,
            created_at=created_at,
            updated_at=created_at,
        )
        self.tickets[ticket_id] = ticket
        self.messages[ticket_id] = []
        return ticket


class InMemoryConfigStore(IConfigStore):

    def __init__(self):
        self.values: Dict[str, Any] = {}

    async def get_value(self, key: str) -> Optional[Any]:
        return self.values.get(key)

    async def set_value(self, key: str, value: Any) -> None:
        self.values[key] = value


class FrameRecorder:
    """Stands in for a WebSocket's send side."""

    def __init__(self):
        self.frames: List[dict] = []

    async def __call__(self, frame: dict) -> None:
        self.frames.append(frame)

    def of_type(self, frame_type: str) -> List[dict]:
        return [f for f in self.frames if f["type"] == frame_type]


_connection_ids = itertools.count(1)


def connect(engine, actor: Actor, recorder: Optional[FrameRecorder] = None):
    """Register a fake connection; returns (session, recorder)."""
    recorder = recorder or FrameRecorder()
    session = engine.gateway.connect(f"conn-{next(_connection_ids)}", actor, recorder)
    return session, recorder


# ========== Fixtures ==========

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ticket_store() -> InMemoryTicketStore:
    return InMemoryTicketStore()


@pytest.fixture
def config_store() -> InMemoryConfigStore:
    return InMemoryConfigStore()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        database_url="sqlite+aiosqlite:///:memory:",
        auto_reply_enabled=False,
        auto_reply_cooldown_seconds=600,
        support_signature="Merchant Support Team",
    )


@pytest.fixture
def engine(settings, ticket_store, config_store, clock):
    return build_support_engine(settings, ticket_store, config_store, clock=clock)


@pytest.fixture
def merchant() -> Actor:
    return Actor(
        id="user-a1", role=ActorRole.MERCHANT, display_name="Rina",
        tenant_id="tenant-a", tenant_name="Kopi Corner",
    )


@pytest.fixture
def other_merchant() -> Actor:
    return Actor(
        id="user-b1", role=ActorRole.MERCHANT, display_name="Budi",
        tenant_id="tenant-b", tenant_name="Bakmi Jaya",
    )


@pytest.fixture
def admin() -> Actor:
    return Actor(id="admin-1", role=ActorRole.ADMIN, display_name="Support Desk")


@pytest.fixture
def ticket(ticket_store) -> Ticket:
    return ticket_store.add_ticket("tenant-a", tenant_name="Kopi Corner")


@pytest.fixture
def connect_actor(engine):
    """Factory fixture: connect_actor(actor) -> (session, recorder)."""
    def _connect(actor: Actor, recorder: Optional[FrameRecorder] = None):
        return connect(engine, actor, recorder)
    return _connect
