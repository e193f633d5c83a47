"""
Auto-Reply Controllers (API Routes)
===================================

FastAPI routes for reply templates and the automated acknowledgment.

Reads are open to any authenticated actor; every write requires ADMIN.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from supportdesk.autoreply.application import (
    TemplateRequest,
    TemplateUpdateRequest,
    TemplateResponse,
    AutoReplySettingsRequest,
    AutoReplySettingsResponse,
)
from supportdesk.engine import SupportEngine
from supportdesk.shared.api.dependencies import get_support_engine, get_current_actor
from supportdesk.tickets.domain import Actor

router = APIRouter(tags=["Auto-Reply"])


# ========== Templates ==========

@router.get("/templates", response_model=List[TemplateResponse], summary="List reply templates")
async def list_templates(
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> List[TemplateResponse]:
    templates = await engine.templates.list_templates()
    return [TemplateResponse.from_domain(t) for t in templates]


@router.post(
    "/templates",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a reply template (admin)",
)
async def create_template(
    request: TemplateRequest,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> TemplateResponse:
    template = await engine.templates.create_template(
        actor, title=request.title, category=request.category, body=request.body
    )
    return TemplateResponse.from_domain(template)


@router.put(
    "/templates/{template_id}",
    response_model=TemplateResponse,
    summary="Update a reply template (admin)",
)
async def update_template(
    template_id: str,
    request: TemplateUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> TemplateResponse:
    template = await engine.templates.update_template(
        actor,
        template_id,
        title=request.title,
        category=request.category,
        body=request.body,
    )
    return TemplateResponse.from_domain(template)


@router.delete(
    "/templates/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a reply template (admin)",
)
async def delete_template(
    template_id: str,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> Response:
    await engine.templates.delete_template(actor, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ========== Auto-reply settings ==========

async def _current_settings(engine: SupportEngine) -> AutoReplySettingsResponse:
    return AutoReplySettingsResponse(
        enabled=await engine.templates.is_auto_reply_enabled(),
        body=await engine.templates.get_auto_reply_body(),
        cooldown_seconds=engine.throttler.cooldown.total_seconds(),
    )


@router.get("/auto-reply", response_model=AutoReplySettingsResponse, summary="Auto-reply settings")
async def get_auto_reply(
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> AutoReplySettingsResponse:
    return await _current_settings(engine)


@router.put(
    "/auto-reply",
    response_model=AutoReplySettingsResponse,
    summary="Update auto-reply settings (admin)",
    description="Omitted fields keep their current value.",
)
async def update_auto_reply(
    request: AutoReplySettingsRequest,
    actor: Actor = Depends(get_current_actor),
    engine: SupportEngine = Depends(get_support_engine),
) -> AutoReplySettingsResponse:
    if request.enabled is not None:
        await engine.templates.set_auto_reply_enabled(actor, request.enabled)
    if request.body is not None:
        await engine.templates.set_auto_reply_body(actor, request.body)
    if request.enabled is None and request.body is None:
        # Still enforce the admin check on an empty update
        engine.templates.require_admin(actor, "change auto-reply settings")
    return await _current_settings(engine)
