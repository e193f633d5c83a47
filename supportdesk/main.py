"""
SupportDesk Realtime - Main Application
=======================================

Real-time support-ticket engine for a multi-tenant POS back office.

Modules:
- Tickets: ticket lifecycle, message timeline, transcript export
- Realtime: WebSocket rooms, ordered broadcast, typing presence
- Auto-Reply: reply templates and the throttled acknowledgment
- SLA: read-time overdue flags

Clean Architecture Layers:
- Interfaces: FastAPI controllers and the WebSocket endpoint
- Application: Services and DTOs
- Domain: Entities, value objects and event schemas
- Infrastructure: Database and YAML seed loading
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration
from supportdesk.config import Settings, get_settings

# Infrastructure
from supportdesk.infrastructure.database import (
    init_database, close_database, create_tables, get_session_maker
)
from supportdesk.autoreply.infrastructure import (
    SQLAlchemyConfigStore, YAMLTemplateSeedLoader
)
from supportdesk.tickets.infrastructure import SQLAlchemyTicketStore

# Engine
from supportdesk.engine import build_support_engine

# Module Routers
from supportdesk.tickets.interfaces import tickets_router
from supportdesk.autoreply.interfaces import autoreply_router
from supportdesk.realtime.interfaces import realtime_router

# Shared
from supportdesk.shared.api.middleware import install_error_handlers
from supportdesk.shared.infrastructure.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database
    3. Create database tables (development/test only)
    4. Load reply template seed
    5. Build the support engine

    SHUTDOWN:
    1. Close database connections
    """
    settings: Settings = app.state.settings

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting SupportDesk", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database(
        settings.database_url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )

    # Production schemas are managed by migrations
    if settings.environment in ("development", "test"):
        logger.info("Creating database tables")
        try:
            await create_tables()
        except Exception as e:
            logger.warning(f"Database not available - running in degraded mode: {e}")

    logger.info("Loading reply templates", extra={"path": str(settings.reply_templates_path)})
    seed = YAMLTemplateSeedLoader(settings.reply_templates_path)

    session_maker = get_session_maker()
    app.state.engine = build_support_engine(
        settings,
        ticket_store=SQLAlchemyTicketStore(session_maker),
        config_store=SQLAlchemyConfigStore(session_maker),
        seed_templates=seed.templates,
        auto_reply_body=seed.auto_reply_body,
    )

    logger.info("SupportDesk started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down SupportDesk")
    await close_database()
    logger.info("SupportDesk shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application for the given settings."""
    settings = settings or get_settings()

    app = FastAPI(
        title="SupportDesk Realtime API",
        description="""
    ## Real-time support tickets for merchants and the admin desk

    - `GET/POST /tickets` - list and file tickets
    - `POST /tickets/{id}/reply` - post a message (broadcast to the ticket room)
    - `PUT /tickets/{id}/status` - resolve or close (admin)
    - `GET /tickets/{id}/transcript` - plain-text export
    - `/templates`, `/auto-reply` - reply templates and the automated acknowledgment
    - `WS /ws` - event channel: `join_ticket`, `leave_ticket`, `typing`

    Identity comes from the gateway headers `X-Actor-Id`, `X-Actor-Role`,
    `X-Tenant-Id` and `X-Actor-Name`.
    """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Custom Middleware and Exception Handlers (from shared) ===
    install_error_handlers(app)

    # === Include Module Routers ===
    app.include_router(tickets_router)
    app.include_router(autoreply_router)
    app.include_router(realtime_router)

    # === Health Check Endpoint ===

    @app.get("/health", tags=["Health"], responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "version": "1.0.0",
                        "environment": "development",
                        "checks": {"live_sessions": 3, "rooms": 2}
                    }
                }
            }
        }
    })
    async def health_check(request: Request):
        """
        Health check endpoint for load balancers and orchestrators.

        Reports the number of live WebSocket sessions and active rooms.
        """
        engine = getattr(request.app.state, "engine", None)
        checks = {
            "live_sessions": engine.registry.session_count if engine else 0,
            "rooms": engine.registry.room_count if engine else 0,
        }
        return {
            "status": "healthy" if engine else "starting",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": checks
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "supportdesk.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.environment == "development",
        log_level=_settings.log_level.lower()
    )
