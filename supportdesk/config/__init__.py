"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="supportdesk-realtime", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/supportdesk",
        description="PostgreSQL connection URL (async)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== SLA ==========
    sla_hours: float = Field(
        default=24,
        description="Hours after which an open ticket is flagged overdue",
        gt=0
    )

    # ========== Auto-Reply ==========
    auto_reply_enabled: bool = Field(
        default=False,
        description="Initial auto-reply flag when the config store has none"
    )
    auto_reply_cooldown_seconds: int = Field(
        default=600,
        description="Minimum seconds between automated replies on one ticket",
        ge=0
    )
    support_signature: str = Field(
        default="Merchant Support Team",
        description="Signature block appended to rendered templates"
    )
    reply_templates_path: Path = Field(
        default=Path("reply_templates.yaml"),
        description="YAML file with default reply templates"
    )

    # ========== Presence ==========
    presence_quiet_seconds: float = Field(
        default=5.0,
        description="Seconds after which a typing signal is considered stale",
        gt=0
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "test", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class ActorRole(str):
    """Roles an authenticated connection can hold."""
    MERCHANT = "MERCHANT"
    ADMIN = "ADMIN"


class SenderRole(str):
    """Roles recorded on a message."""
    MERCHANT = "MERCHANT"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"


class TicketStatus(str):
    """Ticket lifecycle statuses."""
    OPEN = "OPEN"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class TicketPriority(str):
    """Ticket priority labels."""
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


# ========== Lists for validation ==========

VALID_ACTOR_ROLES = [ActorRole.MERCHANT, ActorRole.ADMIN]
VALID_SENDER_ROLES = [SenderRole.MERCHANT, SenderRole.ADMIN, SenderRole.SYSTEM]
VALID_STATUSES = [TicketStatus.OPEN, TicketStatus.RESOLVED, TicketStatus.CLOSED]
SETTABLE_STATUSES = [TicketStatus.RESOLVED, TicketStatus.CLOSED]
VALID_PRIORITIES = [
    TicketPriority.LOW, TicketPriority.NORMAL,
    TicketPriority.HIGH, TicketPriority.URGENT
]

# Forward-only ordering of statuses
STATUS_ORDER = {
    TicketStatus.OPEN: 0,
    TicketStatus.RESOLVED: 1,
    TicketStatus.CLOSED: 2,
}
