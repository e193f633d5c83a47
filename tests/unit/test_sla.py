"""
SLA evaluation tests.

Run with: pytest tests/unit/test_sla.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from supportdesk.config import TicketStatus
from supportdesk.sla.domain import SLAEvaluator, SLASnapshot
from supportdesk.sla.domain.value_objects import REMAINING_HOURS_FLOOR
from supportdesk.tickets.domain import Ticket

CREATED = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def make_ticket(status=TicketStatus.OPEN) -> Ticket:
    return Ticket(
        id="t-1",
        subject="EDC not printing",
        tenant_id="tenant-a",
        status=status,
        created_at=CREATED,
        updated_at=CREATED,
    )


class TestOverdue:

    def test_fresh_ticket_is_not_overdue(self):
        ticket = make_ticket()
        assert not SLAEvaluator.is_overdue(ticket, 24, CREATED + timedelta(hours=1))

    def test_open_ticket_past_threshold_is_overdue(self):
        """Created at T, evaluated at T+25h with a 24h threshold."""
        ticket = make_ticket()
        now = CREATED + timedelta(hours=25)
        assert SLAEvaluator.is_overdue(ticket, 24, now)
        assert SLAEvaluator.remaining_hours(ticket, 24, now) == -1

    def test_exactly_at_threshold_is_not_overdue(self):
        ticket = make_ticket()
        assert not SLAEvaluator.is_overdue(ticket, 24, CREATED + timedelta(hours=24))

    @pytest.mark.parametrize("status", [TicketStatus.RESOLVED, TicketStatus.CLOSED])
    def test_non_open_tickets_are_never_overdue(self, status):
        ticket = make_ticket(status)
        now = CREATED + timedelta(days=30)
        assert not SLAEvaluator.is_overdue(ticket, 24, now)
        assert SLAEvaluator.remaining_hours(ticket, 24, now) is None


class TestRemainingHours:

    def test_rounds_to_whole_hours(self):
        ticket = make_ticket()
        now = CREATED + timedelta(hours=10, minutes=20)
        assert SLAEvaluator.remaining_hours(ticket, 24, now) == 14

    def test_clamped_for_very_old_tickets(self):
        ticket = make_ticket()
        now = CREATED + timedelta(days=365)
        assert SLAEvaluator.remaining_hours(ticket, 24, now) == REMAINING_HOURS_FLOOR


class TestSnapshot:

    def test_snapshot_combines_both_views(self):
        snapshot = SLASnapshot.for_ticket(make_ticket(), 24, CREATED + timedelta(hours=30))
        assert snapshot.is_overdue is True
        assert snapshot.remaining_hours == -6

    def test_threshold_is_configurable(self):
        snapshot = SLASnapshot.for_ticket(make_ticket(), 4, CREATED + timedelta(hours=5))
        assert snapshot.is_overdue is True
