"""
Auto-Reply Application Services
===============================

Application services for reply templates and the automated acknowledgment.

Following SOLID principles:
- Single Responsibility: TemplateService owns configuration, the throttler
  owns the cooldown gate, AutoReplyService composes them
- Dependency Inversion: configuration is read through IConfigStore
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from supportdesk.autoreply.domain import Template, TemplateContext, TemplateRenderer
from supportdesk.config import SenderRole
from supportdesk.core import (
    ForbiddenException, ResourceNotFoundException, ValidationException
)
from supportdesk.shared.infrastructure.logging import get_logger
from supportdesk.tickets.domain import Actor, Message, Ticket

logger = get_logger(__name__)

Clock = Callable[[], datetime]
PostCallable = Callable[[Ticket, str], Awaitable[Message]]

TEMPLATES_KEY = "support.templates"
AUTO_REPLY_ENABLED_KEY = "support.auto_reply_enabled"
AUTO_REPLY_BODY_KEY = "support.auto_reply_body"

DEFAULT_AUTO_REPLY_BODY = (
    "Hi {merchant_name}, thanks for contacting us about ticket #{ticket_id}. "
    "We received your message on {date} and an agent will reply shortly."
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ========== Store Interface (Dependency Inversion) ==========

class IConfigStore(ABC):
    """Key-value store holding the admin tenant configuration."""

    @abstractmethod
    async def get_value(self, key: str) -> Optional[Any]:
        """Get a JSON-compatible value, or None when unset."""

    @abstractmethod
    async def set_value(self, key: str, value: Any) -> None:
        """Insert or replace a value."""


# ========== Template configuration ==========

class TemplateService:
    """
    Pass-through CRUD for reply templates and the auto-reply settings.

    Every mutation requires an ADMIN actor. Until an admin saves templates,
    reads fall back to the seed templates loaded at startup.
    """

    def __init__(
        self,
        config_store: IConfigStore,
        seed_templates: Optional[List[Template]] = None,
        default_enabled: bool = False,
        default_auto_reply_body: str = DEFAULT_AUTO_REPLY_BODY,
    ):
        self._store = config_store
        self._seed = list(seed_templates or [])
        self._default_enabled = default_enabled
        self._default_body = default_auto_reply_body

    async def list_templates(self) -> List[Template]:
        raw = await self._store.get_value(TEMPLATES_KEY)
        if raw is None:
            return list(self._seed)
        return [Template(**item) for item in raw]

    async def create_template(self, actor: Actor, title: str, category: str, body: str) -> Template:
        self.require_admin(actor, "create templates")
        template = self._build(title=title, category=category, body=body)
        templates = await self.list_templates()
        templates.append(template)
        await self._save(templates)
        logger.info("Template created", extra={"template_id": template.id, "actor_id": actor.id})
        return template

    async def update_template(
        self,
        actor: Actor,
        template_id: str,
        title: Optional[str] = None,
        category: Optional[str] = None,
        body: Optional[str] = None,
    ) -> Template:
        self.require_admin(actor, "update templates")
        templates = await self.list_templates()
        for index, existing in enumerate(templates):
            if existing.id == template_id:
                changes = {
                    k: v for k, v in
                    {"title": title, "category": category, "body": body}.items()
                    if v is not None
                }
                updated = self._build(**{
                    "title": existing.title,
                    "category": existing.category,
                    "body": existing.body,
                    "id": existing.id,
                    **changes,
                })
                templates[index] = updated
                await self._save(templates)
                return updated
        raise ResourceNotFoundException("Template", template_id)

    async def delete_template(self, actor: Actor, template_id: str) -> None:
        self.require_admin(actor, "delete templates")
        templates = await self.list_templates()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            raise ResourceNotFoundException("Template", template_id)
        await self._save(remaining)

    async def is_auto_reply_enabled(self) -> bool:
        value = await self._store.get_value(AUTO_REPLY_ENABLED_KEY)
        return self._default_enabled if value is None else bool(value)

    async def set_auto_reply_enabled(self, actor: Actor, enabled: bool) -> bool:
        self.require_admin(actor, "toggle auto-reply")
        await self._store.set_value(AUTO_REPLY_ENABLED_KEY, bool(enabled))
        logger.info("Auto-reply toggled", extra={"enabled": enabled, "actor_id": actor.id})
        return bool(enabled)

    async def get_auto_reply_body(self) -> str:
        value = await self._store.get_value(AUTO_REPLY_BODY_KEY)
        return value or self._default_body

    async def set_auto_reply_body(self, actor: Actor, body: str) -> str:
        self.require_admin(actor, "change the auto-reply message")
        if not body or not body.strip():
            raise ValidationException("Auto-reply message cannot be empty")
        await self._store.set_value(AUTO_REPLY_BODY_KEY, body)
        return body

    async def _save(self, templates: List[Template]) -> None:
        await self._store.set_value(TEMPLATES_KEY, [
            {"id": t.id, "title": t.title, "category": t.category, "body": t.body}
            for t in templates
        ])

    @staticmethod
    def _build(**fields) -> Template:
        try:
            return Template(**fields)
        except ValueError as e:
            raise ValidationException(str(e)) from e

    @staticmethod
    def require_admin(actor: Actor, action: str) -> None:
        if not actor.is_admin:
            raise ForbiddenException(action, actor.role)


# ========== Cooldown gate ==========

class AutoReplyThrottler:
    """
    Per-ticket cooldown between automated replies.

    ``try_acquire`` checks and records in one locked step, so two messages
    racing on the same ticket cannot both pass. State is process memory and
    resets on restart.
    """

    def __init__(self, cooldown_seconds: float = 600):
        self._cooldown = timedelta(seconds=cooldown_seconds)
        self._last_reply_at: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    @property
    def cooldown(self) -> timedelta:
        return self._cooldown

    def try_acquire(self, ticket_id: str, now: datetime) -> bool:
        with self._lock:
            last = self._last_reply_at.get(ticket_id)
            if last is not None and now - last < self._cooldown:
                return False
            self._last_reply_at[ticket_id] = now
            return True

    def last_reply_at(self, ticket_id: str) -> Optional[datetime]:
        return self._last_reply_at.get(ticket_id)

    def reset(self, ticket_id: Optional[str] = None) -> None:
        with self._lock:
            if ticket_id is None:
                self._last_reply_at.clear()
            else:
                self._last_reply_at.pop(ticket_id, None)


class AutoReplyService:
    """
    Decides on and sends the automated acknowledgment for one inbound message.
    """

    def __init__(
        self,
        templates: TemplateService,
        throttler: AutoReplyThrottler,
        renderer: TemplateRenderer,
        clock: Clock = _utc_now,
    ):
        self._templates = templates
        self._throttler = throttler
        self._renderer = renderer
        self._clock = clock

    async def maybe_reply(self, ticket: Ticket, message: Message, post: PostCallable) -> Optional[Message]:
        """
        Send an acknowledgment if the message qualifies and the cooldown allows.

        Args:
            ticket: Ticket the message belongs to
            message: The inbound message just committed
            post: Persists and broadcasts a SYSTEM message without
                consulting this service again

        Returns:
            The automated message, or None when nothing was sent
        """
        if message.is_auto_generated or message.sender_role == SenderRole.ADMIN:
            return None
        if not await self._templates.is_auto_reply_enabled():
            return None

        now = self._clock()
        if not self._throttler.try_acquire(ticket.id, now):
            logger.debug("Auto-reply suppressed by cooldown", extra={"ticket_id": ticket.id})
            return None

        body = await self._templates.get_auto_reply_body()
        text = self._renderer.render(body, TemplateContext(
            merchant_name=ticket.tenant_name or ticket.tenant_id,
            ticket_id=ticket.id,
            date=now,
        ))
        reply = await post(ticket, text)
        logger.info("Auto-reply sent", extra={"ticket_id": ticket.id, "message_id": reply.id})
        return reply
