"""
Ticket Domain Layer
===================

Entities for support tickets and their message timelines.

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from supportdesk.tickets.domain.entities import (
    Actor,
    Message,
    Ticket,
    TranscriptFormatter,
)

__all__ = [
    "Actor",
    "Message",
    "Ticket",
    "TranscriptFormatter",
]
