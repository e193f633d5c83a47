"""
Auto-Reply Interfaces Layer
===========================

FastAPI routes for templates and auto-reply settings.
"""

from supportdesk.autoreply.interfaces.controllers import router as autoreply_router

__all__ = ["autoreply_router"]
