"""
Realtime Domain Entities
========================

Ephemeral objects of the event channel. None of these are persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Set

from supportdesk.config import ActorRole
from supportdesk.tickets.domain import Actor


SendCallable = Callable[[dict[str, Any]], Awaitable[None]]


@dataclass(eq=False)
class Session:
    """
    One live connection.

    ``send`` is bound to the transport (a WebSocket in production, a
    list-appending coroutine in tests) and receives wire dicts.
    """
    connection_id: str
    actor: Actor
    send: SendCallable
    joined: Set[str] = field(default_factory=set)
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    async def deliver(self, event) -> None:
        await self.send(event.to_wire())

    @property
    def is_admin(self) -> bool:
        return self.actor.is_admin


@dataclass(frozen=True)
class PresenceSignal:
    """Latest typing state of one actor on one ticket."""
    ticket_id: str
    actor_id: str
    role: ActorRole
    is_typing: bool
    updated_at: datetime

    def is_stale(self, now: datetime, quiet_seconds: float) -> bool:
        return (now - self.updated_at).total_seconds() > quiet_seconds
