"""
Auto-Reply Application DTOs
===========================

Pydantic models for the template and auto-reply configuration API.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class TemplateRequest(BaseModel):
    """Request model for creating a template."""
    title: str = Field(..., min_length=1, description="Template title")
    category: str = Field(default="general", description="Grouping label")
    body: str = Field(..., min_length=1, description="Body with {merchant_name}, {ticket_id}, {date}")


class TemplateUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their value."""
    title: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    body: Optional[str] = Field(None, min_length=1)


class TemplateResponse(BaseModel):
    id: str
    title: str
    category: str
    body: str

    @classmethod
    def from_domain(cls, template: Any) -> "TemplateResponse":
        return cls(
            id=template.id,
            title=template.title,
            category=template.category,
            body=template.body,
        )


class AutoReplySettingsRequest(BaseModel):
    enabled: Optional[bool] = Field(None, description="Turn the automated acknowledgment on/off")
    body: Optional[str] = Field(None, min_length=1, description="Template body used for the acknowledgment")


class AutoReplySettingsResponse(BaseModel):
    enabled: bool
    body: str
    cooldown_seconds: float
