"""
Ticket Infrastructure Layer
===========================

SQLAlchemy models and the database-backed ticket store.
"""

from supportdesk.tickets.infrastructure.models import TicketModel, MessageModel
from supportdesk.tickets.infrastructure.repositories import SQLAlchemyTicketStore

__all__ = [
    "TicketModel",
    "MessageModel",
    "SQLAlchemyTicketStore",
]
