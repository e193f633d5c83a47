"""
Auto-Reply Application Layer
============================

Contains:
- TemplateService: template CRUD and auto-reply settings
- AutoReplyThrottler: per-ticket cooldown gate
- AutoReplyService: qualification, rendering and sending
- IConfigStore: configuration store interface
"""

from supportdesk.autoreply.application.services import (
    IConfigStore,
    TemplateService,
    AutoReplyThrottler,
    AutoReplyService,
    DEFAULT_AUTO_REPLY_BODY,
    TEMPLATES_KEY,
    AUTO_REPLY_ENABLED_KEY,
    AUTO_REPLY_BODY_KEY,
)
from supportdesk.autoreply.application.dto import (
    TemplateRequest,
    TemplateUpdateRequest,
    TemplateResponse,
    AutoReplySettingsRequest,
    AutoReplySettingsResponse,
)

__all__ = [
    "IConfigStore",
    "TemplateService",
    "AutoReplyThrottler",
    "AutoReplyService",
    "DEFAULT_AUTO_REPLY_BODY",
    "TEMPLATES_KEY",
    "AUTO_REPLY_ENABLED_KEY",
    "AUTO_REPLY_BODY_KEY",
    # DTOs
    "TemplateRequest",
    "TemplateUpdateRequest",
    "TemplateResponse",
    "AutoReplySettingsRequest",
    "AutoReplySettingsResponse",
]
