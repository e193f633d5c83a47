"""
TicketService tests: submission, status transitions, reads.

Run with: pytest tests/unit/test_ticket_service.py -v
"""

import asyncio

import pytest

from supportdesk.config import SenderRole, TicketPriority, TicketStatus
from supportdesk.core import (
    ForbiddenException,
    ResourceNotFoundException,
    TransientIOException,
    UnauthorizedException,
    ValidationException,
)


class TestSubmitMessage:

    async def test_body_is_trimmed_and_stored(self, engine, ticket, ticket_store, merchant):
        message = await engine.tickets.submit_message(ticket.id, merchant, "  Card reader offline  ")
        assert message.body == "Card reader offline"
        assert message.sender_role == SenderRole.MERCHANT
        assert ticket_store.messages[ticket.id] == [message]

    @pytest.mark.parametrize("body", ["", "   ", "\n\t"])
    async def test_empty_body_rejected(self, engine, ticket, ticket_store, merchant, body):
        with pytest.raises(ValidationException):
            await engine.tickets.submit_message(ticket.id, merchant, body)
        assert ticket_store.messages[ticket.id] == []

    async def test_unknown_ticket(self, engine, merchant):
        with pytest.raises(ResourceNotFoundException):
            await engine.tickets.submit_message("missing", merchant, "hello")

    async def test_other_tenant_cannot_write(self, engine, ticket, ticket_store, other_merchant):
        with pytest.raises(UnauthorizedException):
            await engine.tickets.submit_message(ticket.id, other_merchant, "hello")
        assert ticket_store.messages[ticket.id] == []

    async def test_admin_writes_as_admin(self, engine, ticket, admin):
        message = await engine.tickets.submit_message(ticket.id, admin, "Looking into it")
        assert message.sender_role == SenderRole.ADMIN

    async def test_append_touches_updated_at(self, engine, ticket, ticket_store, merchant, clock):
        clock.advance(hours=2)
        await engine.tickets.submit_message(ticket.id, merchant, "ping")
        assert ticket_store.tickets[ticket.id].updated_at == clock.now

    async def test_store_failure_surfaces_and_broadcasts_nothing(
        self, engine, ticket, ticket_store, merchant, connect_actor
    ):
        session, recorder = connect_actor(merchant)
        await engine.gateway.join_ticket(session, ticket.id)
        ticket_store.fail_appends = True

        with pytest.raises(TransientIOException):
            await engine.tickets.submit_message(ticket.id, merchant, "hello")
        assert recorder.frames == []

    async def test_concurrent_submissions_keep_commit_order(
        self, engine, ticket, ticket_store, admin, merchant, connect_actor
    ):
        first, first_frames = connect_actor(merchant)
        second, second_frames = connect_actor(admin)
        await engine.gateway.join_ticket(first, ticket.id)
        await engine.gateway.join_ticket(second, ticket.id)

        await asyncio.gather(*[
            engine.tickets.submit_message(ticket.id, admin, f"msg {i}") for i in range(10)
        ])

        stored = [m.id for m in ticket_store.messages[ticket.id]]
        for frames in (first_frames, second_frames):
            assert [f["message"]["id"] for f in frames.of_type("new_message")] == stored


class TestSetStatus:

    async def test_admin_resolves(self, engine, ticket, admin, connect_actor, merchant):
        session, recorder = connect_actor(merchant)
        await engine.gateway.join_ticket(session, ticket.id)

        updated = await engine.tickets.set_status(ticket.id, admin, TicketStatus.RESOLVED)

        assert updated.status == TicketStatus.RESOLVED
        frames = recorder.of_type("status_changed")
        assert len(frames) == 1
        assert frames[0]["ticketId"] == ticket.id
        assert frames[0]["status"] == "RESOLVED"

    async def test_same_status_twice_broadcasts_once(
        self, engine, ticket, ticket_store, admin, connect_actor
    ):
        session, recorder = connect_actor(admin)
        await engine.gateway.join_ticket(session, ticket.id)

        await engine.tickets.set_status(ticket.id, admin, TicketStatus.RESOLVED)
        await engine.tickets.set_status(ticket.id, admin, TicketStatus.RESOLVED)

        assert len(recorder.of_type("status_changed")) == 1
        assert ticket_store.status_writes == 1

    async def test_merchant_forbidden(self, engine, ticket, merchant):
        with pytest.raises(ForbiddenException):
            await engine.tickets.set_status(ticket.id, merchant, TicketStatus.CLOSED)

    @pytest.mark.parametrize("target", [TicketStatus.OPEN, "ARCHIVED"])
    async def test_invalid_target_rejected(self, engine, ticket, admin, target):
        with pytest.raises(ValidationException):
            await engine.tickets.set_status(ticket.id, admin, target)

    async def test_no_backward_move(self, engine, ticket, admin):
        await engine.tickets.set_status(ticket.id, admin, TicketStatus.CLOSED)
        with pytest.raises(ValidationException):
            await engine.tickets.set_status(ticket.id, admin, TicketStatus.RESOLVED)

    async def test_unknown_ticket(self, engine, admin):
        with pytest.raises(ResourceNotFoundException):
            await engine.tickets.set_status("missing", admin, TicketStatus.CLOSED)

    async def test_resolved_ticket_is_never_overdue(self, engine, ticket, admin, clock):
        clock.advance(hours=48)
        updated = await engine.tickets.set_status(ticket.id, admin, TicketStatus.RESOLVED)
        snapshot = engine.tickets.sla_snapshot(updated)
        assert snapshot.is_overdue is False
        assert snapshot.remaining_hours is None


class TestCreateTicket:

    async def test_merchant_files_ticket(self, engine, merchant, admin, connect_actor):
        _, admin_frames = connect_actor(admin)

        ticket = await engine.tickets.create_ticket(
            merchant, "QRIS payment failed", "Customer was charged twice", TicketPriority.HIGH
        )

        assert ticket.tenant_id == "tenant-a"
        assert ticket.status == TicketStatus.OPEN
        assert [m.body for m in ticket.messages] == ["Customer was charged twice"]
        created = admin_frames.of_type("ticket:created")
        assert created == [{
            "type": "ticket:created",
            "ticketId": ticket.id,
            "subject": "QRIS payment failed",
            "tenantId": "tenant-a",
        }]

    async def test_admin_cannot_file(self, engine, admin):
        with pytest.raises(ForbiddenException):
            await engine.tickets.create_ticket(admin, "x", "y")

    async def test_blank_subject_rejected(self, engine, merchant):
        with pytest.raises(ValidationException):
            await engine.tickets.create_ticket(merchant, "  ", "body")

    async def test_unknown_priority_rejected(self, engine, merchant):
        with pytest.raises(ValidationException):
            await engine.tickets.create_ticket(merchant, "Subject", "body", "CRITICAL")


class TestReads:

    async def test_merchant_list_is_pinned_to_tenant(
        self, engine, ticket_store, merchant, admin
    ):
        ticket_store.add_ticket("tenant-a")
        ticket_store.add_ticket("tenant-b")

        own = await engine.tickets.list_tickets(merchant, tenant_id="tenant-b")
        assert {t.tenant_id for t in own} == {"tenant-a"}

        everything = await engine.tickets.list_tickets(admin)
        assert {t.tenant_id for t in everything} == {"tenant-a", "tenant-b"}

    async def test_status_filter(self, engine, ticket_store, admin):
        ticket_store.add_ticket("tenant-a")
        ticket_store.add_ticket("tenant-a", status=TicketStatus.CLOSED)
        closed = await engine.tickets.list_tickets(admin, status=TicketStatus.CLOSED)
        assert [t.status for t in closed] == [TicketStatus.CLOSED]

    async def test_foreign_ticket_reads_as_not_found(self, engine, ticket, other_merchant):
        with pytest.raises(ResourceNotFoundException):
            await engine.tickets.get_ticket(other_merchant, ticket.id)

    async def test_transcript(self, engine, ticket, merchant, admin, clock):
        await engine.tickets.submit_message(ticket.id, merchant, "Reader offline")
        clock.advance(minutes=5)
        await engine.tickets.submit_message(ticket.id, admin, "Please restart it")

        text = await engine.tickets.export_transcript(merchant, ticket.id)

        lines = text.splitlines()
        assert lines[0] == f"Ticket: {ticket.id}"
        assert "Merchant: Kopi Corner" in lines
        assert lines[-2] == "[2024-03-01 09:00:00] MERCHANT: Reader offline"
        assert lines[-1] == "[2024-03-01 09:05:00] ADMIN: Please restart it"
