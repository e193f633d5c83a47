"""
Auto-Reply Infrastructure Layer
===============================

- Models: SQLAlchemy ORM model for configuration entries
- Repositories: SQLAlchemy config store, YAML template seed loader
"""

from supportdesk.autoreply.infrastructure.models import ConfigEntryModel
from supportdesk.autoreply.infrastructure.repositories import (
    SQLAlchemyConfigStore,
    YAMLTemplateSeedLoader,
)

__all__ = [
    "ConfigEntryModel",
    "SQLAlchemyConfigStore",
    "YAMLTemplateSeedLoader",
]
