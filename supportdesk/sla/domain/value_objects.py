"""
SLA Value Objects
==================

Pure SLA calculations for support tickets.

Overdue-ness is a view computed on every read: nothing here is stored,
scheduled or alerted on.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from supportdesk.config import TicketStatus


REMAINING_HOURS_FLOOR = -999


class SLAEvaluator:
    """
    Pure functions for SLA calculations.

    Stateless utility class; every method takes the evaluation time
    explicitly (defaulting to now) so results are reproducible.
    """

    @staticmethod
    def elapsed_hours(ticket, now: Optional[datetime] = None) -> float:
        """Hours since the ticket was created."""
        current_time = now or datetime.now(timezone.utc)
        return (current_time - ticket.created_at).total_seconds() / 3600

    @staticmethod
    def is_overdue(ticket, sla_hours: float, now: Optional[datetime] = None) -> bool:
        """
        True iff the ticket is OPEN and strictly older than the threshold.

        Args:
            ticket: Anything with ``status`` and ``created_at``
            sla_hours: Threshold in hours
            now: Evaluation time (defaults to current UTC time)
        """
        if ticket.status != TicketStatus.OPEN:
            return False
        return SLAEvaluator.elapsed_hours(ticket, now) > sla_hours

    @staticmethod
    def remaining_hours(ticket, sla_hours: float, now: Optional[datetime] = None) -> Optional[int]:
        """
        Whole hours left before the threshold, negative once overdue.

        Returns None for tickets that are no longer OPEN. Clamped at
        REMAINING_HOURS_FLOOR so very old tickets display a bounded value.
        """
        if ticket.status != TicketStatus.OPEN:
            return None
        remaining = round(sla_hours - SLAEvaluator.elapsed_hours(ticket, now))
        return max(REMAINING_HOURS_FLOOR, remaining)


@dataclass(frozen=True)
class SLASnapshot:
    """
    SLA view of one ticket at one instant.

    Attached to ticket read models; recomputed for every response.
    """
    is_overdue: bool
    remaining_hours: Optional[int]

    @classmethod
    def for_ticket(cls, ticket, sla_hours: float, now: Optional[datetime] = None) -> "SLASnapshot":
        current_time = now or datetime.now(timezone.utc)
        return cls(
            is_overdue=SLAEvaluator.is_overdue(ticket, sla_hours, current_time),
            remaining_hours=SLAEvaluator.remaining_hours(ticket, sla_hours, current_time),
        )
