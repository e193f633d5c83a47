"""
Ticket Infrastructure Models
============================

SQLAlchemy ORM models for tickets and their message timelines.

These are the database representations of our domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    String, DateTime, Boolean, Integer, Text, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import Mapped, mapped_column

from supportdesk.infrastructure.database import Base
from supportdesk.config import TicketStatus, TicketPriority


class TicketModel(Base):
    """
    Database model for Ticket entity.

    Maps to the 'tickets' table.
    """
    __tablename__ = "tickets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Tenant scoping
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TicketStatus.OPEN, index=True)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default=TicketPriority.NORMAL)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))


class MessageModel(Base):
    """
    Database model for Message entity.

    Maps to the 'ticket_messages' table. ``seq`` is unique per ticket and
    fixes the order of messages sharing a timestamp.
    """
    __tablename__ = "ticket_messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    ticket_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False)

    sender_role: Mapped[str] = mapped_column(String(20), nullable=False)
    sender_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    is_auto_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("ticket_id", "seq", name="uq_ticket_messages_ticket_seq"),
    )
