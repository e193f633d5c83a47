"""
Auto-reply cooldown and qualification tests.

Run with: pytest tests/unit/test_auto_reply.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from supportdesk.autoreply.application import AUTO_REPLY_ENABLED_KEY, AutoReplyThrottler
from supportdesk.config import SenderRole
from supportdesk.tickets.application import HeaderActorAuthenticator

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def auto_messages(ticket_store, ticket_id):
    return [m for m in ticket_store.messages[ticket_id] if m.is_auto_generated]


@pytest.fixture
def enabled(config_store):
    config_store.values[AUTO_REPLY_ENABLED_KEY] = True


class TestAutoReplyThrottler:

    def test_first_acquire_passes(self):
        throttler = AutoReplyThrottler(600)
        assert throttler.try_acquire("t-1", T0)
        assert throttler.last_reply_at("t-1") == T0

    def test_second_acquire_inside_cooldown_blocked(self):
        throttler = AutoReplyThrottler(600)
        throttler.try_acquire("t-1", T0)
        assert not throttler.try_acquire("t-1", T0 + timedelta(minutes=1))
        # A blocked attempt does not move the window
        assert throttler.last_reply_at("t-1") == T0

    def test_acquire_after_cooldown_passes(self):
        throttler = AutoReplyThrottler(600)
        throttler.try_acquire("t-1", T0)
        assert throttler.try_acquire("t-1", T0 + timedelta(minutes=11))

    def test_tickets_are_throttled_independently(self):
        throttler = AutoReplyThrottler(600)
        throttler.try_acquire("t-1", T0)
        assert throttler.try_acquire("t-2", T0)

    def test_reset(self):
        throttler = AutoReplyThrottler(600)
        throttler.try_acquire("t-1", T0)
        throttler.reset("t-1")
        assert throttler.last_reply_at("t-1") is None


class TestAutoReplyFlow:

    async def test_two_messages_one_minute_apart_yield_one_reply(
        self, engine, ticket, ticket_store, merchant, clock, enabled
    ):
        await engine.tickets.submit_message(ticket.id, merchant, "Printer jammed")
        clock.advance(minutes=1)
        await engine.tickets.submit_message(ticket.id, merchant, "Still jammed")

        replies = auto_messages(ticket_store, ticket.id)
        assert len(replies) == 1
        assert replies[0].sender_role == SenderRole.SYSTEM

    async def test_messages_eleven_minutes_apart_yield_two_replies(
        self, engine, ticket, ticket_store, merchant, clock, enabled
    ):
        await engine.tickets.submit_message(ticket.id, merchant, "Printer jammed")
        clock.advance(minutes=11)
        await engine.tickets.submit_message(ticket.id, merchant, "Still jammed")

        assert len(auto_messages(ticket_store, ticket.id)) == 2

    async def test_zero_cooldown_never_loops(
        self, settings, ticket_store, config_store, clock, ticket, merchant, enabled
    ):
        from supportdesk.engine import build_support_engine
        no_cooldown = settings.model_copy(update={"auto_reply_cooldown_seconds": 0})
        engine = build_support_engine(no_cooldown, ticket_store, config_store, clock=clock)

        await engine.tickets.submit_message(ticket.id, merchant, "Hello?")

        # Exactly the merchant message plus one acknowledgment
        assert len(ticket_store.messages[ticket.id]) == 2
        assert len(auto_messages(ticket_store, ticket.id)) == 1

    async def test_admin_messages_never_trigger_reply(
        self, engine, ticket, ticket_store, admin, enabled
    ):
        await engine.tickets.submit_message(ticket.id, admin, "We're on it")
        assert auto_messages(ticket_store, ticket.id) == []

    async def test_disabled_sends_nothing(self, engine, ticket, ticket_store, merchant):
        await engine.tickets.submit_message(ticket.id, merchant, "Anyone there?")
        assert auto_messages(ticket_store, ticket.id) == []

    async def test_reply_is_rendered_with_merchant_and_signature(
        self, engine, ticket, ticket_store, merchant, enabled
    ):
        await engine.tickets.submit_message(ticket.id, merchant, "Hi")
        reply = auto_messages(ticket_store, ticket.id)[0]
        assert "Kopi Corner" in reply.body
        assert ticket.id[:8] in reply.body
        assert reply.body.endswith("\n\n--\nMerchant Support Team")

    async def test_cashier_ticket_greets_the_business(self, engine, ticket_store, enabled):
        cashier = HeaderActorAuthenticator().authenticate({
            "X-Actor-Id": "user-a7",
            "X-Actor-Role": "CASHIER",
            "X-Actor-Name": "Dewi",
            "X-Tenant-Id": "tenant-a",
            "X-Tenant-Name": "Kopi Corner",
        })

        ticket = await engine.tickets.create_ticket(cashier, "Printer jammed", "Receipts stuck")

        assert ticket.tenant_name == "Kopi Corner"
        reply = auto_messages(ticket_store, ticket.id)[0]
        assert reply.body.startswith("Hi Kopi Corner,")
        assert "Dewi" not in reply.body

    async def test_reply_is_broadcast_after_the_trigger(
        self, engine, ticket, merchant, connect_actor, enabled
    ):
        session, recorder = connect_actor(merchant)
        await engine.gateway.join_ticket(session, ticket.id)

        await engine.tickets.submit_message(ticket.id, merchant, "Hi")

        frames = recorder.of_type("new_message")
        assert [f["message"]["senderRole"] for f in frames] == ["MERCHANT", "SYSTEM"]
        assert frames[1]["message"]["isAutoGenerated"] is True

    async def test_failed_reply_does_not_fail_the_trigger(
        self, engine, ticket, ticket_store, merchant, enabled, monkeypatch
    ):
        async def broken_body():
            raise RuntimeError("config store down")

        monkeypatch.setattr(engine.templates, "get_auto_reply_body", broken_body)

        message = await engine.tickets.submit_message(ticket.id, merchant, "Hi")
        assert message.body == "Hi"
        assert auto_messages(ticket_store, ticket.id) == []
