"""
Shared API Dependencies
=======================

FastAPI dependencies that resolve the running engine and the caller.
"""

from fastapi import Depends, Request

from supportdesk.engine import SupportEngine
from supportdesk.tickets.domain import Actor


def get_support_engine(request: Request) -> SupportEngine:
    """Engine created by the application lifespan."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise RuntimeError("Support engine not initialized")
    return engine


def get_current_actor(
    request: Request,
    engine: SupportEngine = Depends(get_support_engine),
) -> Actor:
    """
    Authenticated caller of this request.

    Raises:
        UnauthorizedException: identity headers missing or malformed
    """
    return engine.authenticator.authenticate(request.headers)
