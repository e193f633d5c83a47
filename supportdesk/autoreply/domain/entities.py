"""
Auto-Reply Domain Entities
==========================

Reply templates and the renderer that turns them into ticket-ready text.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4


@dataclass(frozen=True)
class Template:
    """
    Canned reply owned by the admin configuration.

    ``id`` only addresses the record for update/delete; templates are
    otherwise identified by what they say.
    """
    title: str
    category: str
    body: str
    id: str = field(default_factory=lambda: str(uuid4()))

    def __post_init__(self):
        if not self.title.strip():
            raise ValueError("Template title cannot be empty")
        if not self.body.strip():
            raise ValueError("Template body cannot be empty")

    def with_changes(self, **changes) -> "Template":
        return replace(self, **changes)


@dataclass(frozen=True)
class TemplateContext:
    """Values available to template placeholders."""
    merchant_name: str
    ticket_id: str
    date: Optional[datetime] = None


class TemplateRenderer:
    """
    Pure placeholder substitution plus a fixed signature block.

    Each placeholder is replaced once (first occurrence). Anything
    unrecognised is left verbatim; rendering never fails.
    """

    DATE_FORMAT = "%d %B %Y %H:%M"
    SIGNATURE_SEPARATOR = "\n\n--\n"

    def __init__(self, signature: str):
        self._signature = signature

    @property
    def signature_block(self) -> str:
        return f"{self.SIGNATURE_SEPARATOR}{self._signature}"

    def render(self, body: str, context: TemplateContext) -> str:
        date = context.date or datetime.now(timezone.utc)
        substitutions = (
            ("{merchant_name}", context.merchant_name),
            ("{ticket_id}", context.ticket_id[:8]),
            ("{date}", date.strftime(self.DATE_FORMAT)),
        )
        text = body
        for placeholder, value in substitutions:
            text = text.replace(placeholder, value, 1)
        return text + self.signature_block
