"""
Auto-Reply Infrastructure Models
================================

SQLAlchemy ORM model for the admin configuration key-value store.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from supportdesk.infrastructure.database import Base


class ConfigEntryModel(Base):
    """
    One configuration key and its JSON value.

    Maps to the 'config_entries' table.
    """
    __tablename__ = "config_entries"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )
