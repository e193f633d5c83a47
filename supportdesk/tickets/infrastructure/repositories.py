"""
Ticket Infrastructure Repositories
==================================

Concrete implementation of the ticket store using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
entities from the database.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from supportdesk.core import ResourceNotFoundException
from supportdesk.infrastructure.database import session_scope, translate_store_errors
from supportdesk.tickets.application import ITicketStore
from supportdesk.tickets.domain import Message, Ticket
from supportdesk.tickets.infrastructure.models import TicketModel, MessageModel


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _message_to_domain(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        ticket_id=model.ticket_id,
        sender_role=model.sender_role,
        sender_id=model.sender_id,
        body=model.body,
        created_at=_as_utc(model.created_at),
        is_auto_generated=model.is_auto_generated,
        seq=model.seq,
    )


def _ticket_to_domain(
    model: TicketModel,
    messages: Optional[List[MessageModel]] = None,
    message_count: Optional[int] = None,
) -> Ticket:
    return Ticket(
        id=model.id,
        subject=model.subject,
        tenant_id=model.tenant_id,
        tenant_name=model.tenant_name,
        status=model.status,
        priority=model.priority,
        created_at=_as_utc(model.created_at),
        updated_at=_as_utc(model.updated_at),
        messages=[_message_to_domain(m) for m in messages or []],
        message_count=message_count,
    )


class SQLAlchemyTicketStore(ITicketStore):
    """
    SQLAlchemy implementation of the ticket store.

    Each call runs in its own unit of work; connectivity failures surface
    as TransientIOException.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def get_ticket(self, ticket_id: str, include_messages: bool = True) -> Optional[Ticket]:
        async with translate_store_errors("get_ticket"):
            async with session_scope(self._session_maker) as session:
                model = await session.get(TicketModel, ticket_id)
                if model is None:
                    return None
                if not include_messages:
                    return _ticket_to_domain(model)

                stmt = (
                    select(MessageModel)
                    .where(MessageModel.ticket_id == ticket_id)
                    .order_by(MessageModel.created_at, MessageModel.seq)
                )
                result = await session.execute(stmt)
                messages = list(result.scalars().all())
                return _ticket_to_domain(model, messages, len(messages))

    async def list_tickets(
        self,
        tenant_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Ticket]:
        async with translate_store_errors("list_tickets"):
            async with session_scope(self._session_maker) as session:
                counts = (
                    select(MessageModel.ticket_id, func.count(MessageModel.id).label("n"))
                    .group_by(MessageModel.ticket_id)
                    .subquery()
                )
                stmt = select(TicketModel, func.coalesce(counts.c.n, 0)).outerjoin(
                    counts, counts.c.ticket_id == TicketModel.id
                )

                # Apply filters
                conditions = []
                if tenant_id is not None:
                    conditions.append(TicketModel.tenant_id == tenant_id)
                if status is not None:
                    conditions.append(TicketModel.status == status)
                if conditions:
                    stmt = stmt.where(and_(*conditions))

                stmt = stmt.order_by(TicketModel.updated_at.desc(), TicketModel.id)

                result = await session.execute(stmt)
                return [
                    _ticket_to_domain(model, message_count=count)
                    for model, count in result.all()
                ]

    async def create_ticket(self, ticket: Ticket, first_message: Message) -> Ticket:
        async with translate_store_errors("create_ticket"):
            async with session_scope(self._session_maker) as session:
                model = TicketModel(
                    id=ticket.id,
                    tenant_id=ticket.tenant_id,
                    tenant_name=ticket.tenant_name,
                    subject=ticket.subject,
                    status=ticket.status,
                    priority=ticket.priority,
                    created_at=ticket.created_at,
                    updated_at=ticket.updated_at,
                )
                session.add(model)
                # Parent row must exist before the FK insert
                await session.flush()

                message = self._new_message_model(first_message, seq=1)
                session.add(message)
                await session.flush()

                return _ticket_to_domain(model, [message], 1)

    async def append_message(self, message: Message) -> Message:
        async with translate_store_errors("append_message"):
            async with session_scope(self._session_maker) as session:
                ticket = await session.get(TicketModel, message.ticket_id)
                if ticket is None:
                    raise ResourceNotFoundException("Ticket", message.ticket_id)

                stmt = select(func.coalesce(func.max(MessageModel.seq), 0)).where(
                    MessageModel.ticket_id == message.ticket_id
                )
                next_seq = (await session.execute(stmt)).scalar_one() + 1

                model = self._new_message_model(message, seq=next_seq)
                session.add(model)
                ticket.updated_at = max(_as_utc(ticket.updated_at), message.created_at)
                await session.flush()

                return _message_to_domain(model)

    async def update_status(self, ticket_id: str, status: str, updated_at: datetime) -> Ticket:
        async with translate_store_errors("update_status"):
            async with session_scope(self._session_maker) as session:
                model = await session.get(TicketModel, ticket_id)
                if model is None:
                    raise ResourceNotFoundException("Ticket", ticket_id)

                model.status = status
                model.updated_at = max(_as_utc(model.updated_at), updated_at)
                await session.flush()

                return _ticket_to_domain(model)

    @staticmethod
    def _new_message_model(message: Message, seq: int) -> MessageModel:
        return MessageModel(
            id=message.id,
            ticket_id=message.ticket_id,
            seq=seq,
            sender_role=message.sender_role,
            sender_id=message.sender_id,
            body=message.body,
            is_auto_generated=message.is_auto_generated,
            created_at=message.created_at,
        )
