"""
Realtime Application Services
=============================

Session Registry, Room Broker and Presence Tracker.

All three keep process-local state in plain dicts owned by the instance;
the application factory creates one of each and injects them, so tests
get isolated instances. They rely on the single asyncio event loop for
mutual exclusion: no method awaits between reading and writing a map.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple

from supportdesk.config import ActorRole
from supportdesk.core import UnauthorizedException
from supportdesk.realtime.domain import Session, PresenceSignal, TypingEvent
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.tickets.domain import Actor, Ticket

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionRegistry:
    """
    Live connections and the ticket rooms each has joined.

    Rooms keep join order (dicts used as ordered sets) so fan-out visits
    members deterministically.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._rooms: Dict[str, Dict[str, Session]] = {}

    # ----- connections -----

    def register(self, session: Session) -> None:
        if session.connection_id in self._sessions:
            raise ValueError(f"Connection {session.connection_id} already registered")
        self._sessions[session.connection_id] = session
        logger.info(
            "Session registered",
            extra={
                "connection_id": session.connection_id,
                "actor_id": session.actor.id,
                "role": session.actor.role
            }
        )

    def unregister(self, connection_id: str) -> List[str]:
        """
        Forget a connection and drop it from every room it joined.

        Returns:
            Ticket ids of the rooms the session left
        """
        session = self._sessions.pop(connection_id, None)
        if session is None:
            return []

        rooms = list(session.joined)
        for ticket_id in rooms:
            self._remove_member(ticket_id, session)
        session.joined.clear()

        logger.info(
            "Session unregistered",
            extra={"connection_id": connection_id, "actor_id": session.actor.id}
        )
        return rooms

    def get(self, connection_id: str) -> Optional[Session]:
        return self._sessions.get(connection_id)

    # ----- rooms -----

    def join(self, session: Session, ticket: Ticket) -> None:
        """
        Add a session to a ticket's room.

        Raises:
            UnauthorizedException: merchant joining another tenant's ticket
        """
        if not session.actor.can_access(ticket):
            logger.warning(
                "Room join refused",
                extra={
                    "connection_id": session.connection_id,
                    "actor_id": session.actor.id,
                    "ticket_id": ticket.id
                }
            )
            raise UnauthorizedException(
                f"Actor {session.actor.id} may not join ticket {ticket.id}",
                details={"ticket_id": ticket.id}
            )
        if session.connection_id not in self._sessions:
            raise ValueError(f"Connection {session.connection_id} is not registered")

        self._rooms.setdefault(ticket.id, {})[session.connection_id] = session
        session.joined.add(ticket.id)

    def leave(self, session: Session, ticket_id: str) -> None:
        self._remove_member(ticket_id, session)
        session.joined.discard(ticket_id)

    def members(self, ticket_id: str) -> List[Session]:
        return list(self._rooms.get(ticket_id, {}).values())

    def admin_sessions(self) -> List[Session]:
        return [s for s in self._sessions.values() if s.is_admin]

    def sessions_for_actor(self, actor_id: str) -> List[Session]:
        return [s for s in self._sessions.values() if s.actor.id == actor_id]

    def is_actor_in_room(self, actor_id: str, ticket_id: str) -> bool:
        return any(s.actor.id == actor_id for s in self._rooms.get(ticket_id, {}).values())

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def _remove_member(self, ticket_id: str, session: Session) -> None:
        room = self._rooms.get(ticket_id)
        if room is None:
            return
        room.pop(session.connection_id, None)
        if not room:
            del self._rooms[ticket_id]


class RoomBroker:
    """
    Best-effort fan-out of events to ticket rooms.

    Delivery goes to every member including the originator. Callers that
    need commit-order delivery hold ``room_lock(ticket_id)`` across the
    store write and the publish.
    """

    def __init__(self, registry: SessionRegistry):
        self._registry = registry
        # ticket_id -> (lock, holders + waiters)
        self._locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def room_lock(self, ticket_id: str) -> AsyncIterator[None]:
        """
        Serialise writers of one ticket.

        The entry lives while anyone holds or waits on it and is removed
        by the last one out, so tickets never joined leave nothing behind.
        """
        lock, users = self._locks.get(ticket_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[ticket_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[ticket_id]
            if users == 1:
                del self._locks[ticket_id]
            else:
                self._locks[ticket_id] = (lock, users - 1)

    @property
    def lock_count(self) -> int:
        return len(self._locks)

    async def publish(self, ticket_id: str, event) -> int:
        """
        Deliver an event to every session in the room.

        Returns:
            Number of sessions that accepted the event
        """
        recipients = self._registry.members(ticket_id)
        delivered = 0
        for session in recipients:
            if await self._deliver(session, event):
                delivered += 1

        logger.debug(
            "Room event published",
            extra={
                "ticket_id": ticket_id,
                "event_type": event.type,
                "recipients": len(recipients),
                "delivered": delivered
            }
        )
        return delivered

    async def publish_to_admins(self, event) -> int:
        delivered = 0
        for session in self._registry.admin_sessions():
            if await self._deliver(session, event):
                delivered += 1
        return delivered

    async def send_to(self, session: Session, event) -> bool:
        """Deliver to a single session (errors back to the originator)."""
        return await self._deliver(session, event)

    async def _deliver(self, session: Session, event) -> bool:
        try:
            await session.deliver(event)
            return True
        except Exception as e:
            # A dead socket only costs its own session the event
            logger.warning(
                "Event delivery failed",
                extra={
                    "connection_id": session.connection_id,
                    "event_type": event.type,
                    "error": str(e)
                }
            )
            return False


class PresenceTracker:
    """
    Per-ticket, per-actor typing state.

    Every signal overwrites the previous one and is broadcast to the room.
    The sender side owns the debounce that later sends ``is_typing=False``;
    this tracker never emits on its own.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        broker: RoomBroker,
        quiet_seconds: float = 5.0,
        clock: Clock = utc_now,
    ):
        self._registry = registry
        self._broker = broker
        self._quiet_seconds = quiet_seconds
        self._clock = clock
        self._signals: Dict[tuple, PresenceSignal] = {}

    async def set_typing(self, ticket_id: str, actor: Actor, is_typing: bool) -> PresenceSignal:
        """
        Record a typing pulse and broadcast it to the room.

        Raises:
            UnauthorizedException: the actor has no session in the room
        """
        if not self._registry.is_actor_in_room(actor.id, ticket_id):
            raise UnauthorizedException(
                f"Actor {actor.id} has not joined ticket {ticket_id}",
                details={"ticket_id": ticket_id}
            )

        signal = PresenceSignal(
            ticket_id=ticket_id,
            actor_id=actor.id,
            role=actor.role,
            is_typing=is_typing,
            updated_at=self._clock(),
        )
        self._signals[(ticket_id, actor.id)] = signal

        event = TypingEvent(
            user_id=actor.id,
            ticket_id=ticket_id,
            is_typing=is_typing,
            role=actor.role,
        )
        try:
            await self._broker.publish(ticket_id, event)
        except Exception as e:
            logger.warning(
                "Typing broadcast failed",
                extra={"ticket_id": ticket_id, "actor_id": actor.id, "error": str(e)}
            )
        return signal

    def signals(self, ticket_id: str) -> List[PresenceSignal]:
        return [s for (tid, _), s in self._signals.items() if tid == ticket_id]

    def active_typists(self, ticket_id: str) -> List[PresenceSignal]:
        """Signals still saying 'typing' and newer than the quiet period."""
        now = self._clock()
        return [
            s for s in self.signals(ticket_id)
            if s.is_typing and not s.is_stale(now, self._quiet_seconds)
        ]

    def clear_actor(self, actor_id: str) -> None:
        for key in [k for k in self._signals if k[1] == actor_id]:
            del self._signals[key]

    @staticmethod
    def is_cross_role(event: TypingEvent, viewer_role: ActorRole) -> bool:
        """Consumer-side filter: surface only the other side's typing."""
        return event.role != viewer_role
