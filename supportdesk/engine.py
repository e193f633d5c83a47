"""
Support Engine
==============

Composition root for the support-ticket engine.

Every collaborator (registry, broker, presence, throttler, services) is
constructed here and owned by one SupportEngine instance. Nothing lives
at module level, so tests build as many isolated engines as they like.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from supportdesk.autoreply.application import (
    IConfigStore,
    TemplateService,
    AutoReplyThrottler,
    AutoReplyService,
    DEFAULT_AUTO_REPLY_BODY,
)
from supportdesk.autoreply.domain import Template, TemplateRenderer
from supportdesk.config import Settings
from supportdesk.realtime.application import (
    SessionRegistry,
    RoomBroker,
    PresenceTracker,
    RealtimeGateway,
    utc_now,
)
from supportdesk.tickets.application import (
    ITicketStore,
    TicketService,
    IActorAuthenticator,
    HeaderActorAuthenticator,
)


@dataclass
class SupportEngine:
    """Live services for one running instance."""
    registry: SessionRegistry
    broker: RoomBroker
    presence: PresenceTracker
    gateway: RealtimeGateway
    throttler: AutoReplyThrottler
    templates: TemplateService
    auto_reply: AutoReplyService
    tickets: TicketService
    authenticator: IActorAuthenticator

    @property
    def session_count(self) -> int:
        return self.registry.session_count


def build_support_engine(
    settings: Settings,
    ticket_store: ITicketStore,
    config_store: IConfigStore,
    seed_templates: Optional[List[Template]] = None,
    auto_reply_body: str = DEFAULT_AUTO_REPLY_BODY,
    authenticator: Optional[IActorAuthenticator] = None,
    clock: Callable[[], datetime] = utc_now,
) -> SupportEngine:
    """
    Wire a SupportEngine from its stores and settings.

    Args:
        settings: Application settings (SLA, cooldown, signature...)
        ticket_store: Durable ticket/message store
        config_store: Key-value store for templates and auto-reply settings
        seed_templates: Templates served until an admin saves their own
        auto_reply_body: Acknowledgment body used until an admin changes it
        authenticator: Identity resolver, gateway headers by default
        clock: Time source shared by every service
    """
    registry = SessionRegistry()
    broker = RoomBroker(registry)
    presence = PresenceTracker(
        registry, broker,
        quiet_seconds=settings.presence_quiet_seconds,
        clock=clock,
    )

    templates = TemplateService(
        config_store,
        seed_templates=seed_templates,
        default_enabled=settings.auto_reply_enabled,
        default_auto_reply_body=auto_reply_body,
    )
    throttler = AutoReplyThrottler(cooldown_seconds=settings.auto_reply_cooldown_seconds)
    auto_reply = AutoReplyService(
        templates,
        throttler,
        TemplateRenderer(settings.support_signature),
        clock=clock,
    )

    tickets = TicketService(
        ticket_store,
        broker,
        auto_reply=auto_reply,
        sla_hours=settings.sla_hours,
        clock=clock,
    )
    gateway = RealtimeGateway(registry, broker, presence, ticket_lookup=tickets.lookup)

    return SupportEngine(
        registry=registry,
        broker=broker,
        presence=presence,
        gateway=gateway,
        throttler=throttler,
        templates=templates,
        auto_reply=auto_reply,
        tickets=tickets,
        authenticator=authenticator or HeaderActorAuthenticator(),
    )
