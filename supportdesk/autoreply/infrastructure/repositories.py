"""
Auto-Reply Infrastructure Repositories
======================================

Concrete configuration store and the YAML seed loader for templates.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional

import yaml
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from supportdesk.autoreply.application import IConfigStore, DEFAULT_AUTO_REPLY_BODY
from supportdesk.autoreply.domain import Template
from supportdesk.autoreply.infrastructure.models import ConfigEntryModel
from supportdesk.core import ConfigurationException
from supportdesk.infrastructure.database import session_scope, translate_store_errors
from supportdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class SQLAlchemyConfigStore(IConfigStore):
    """
    Key-value configuration persisted in the 'config_entries' table.

    Opens a short unit of work per call so it can be shared by every
    request and connection handler.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def get_value(self, key: str) -> Optional[Any]:
        async with translate_store_errors("get_config"):
            async with session_scope(self._session_maker) as session:
                stmt = select(ConfigEntryModel.value).where(ConfigEntryModel.key == key)
                result = await session.execute(stmt)
                return result.scalar_one_or_none()

    async def set_value(self, key: str, value: Any) -> None:
        async with translate_store_errors("set_config"):
            async with session_scope(self._session_maker) as session:
                model = await session.get(ConfigEntryModel, key)
                if model is None:
                    session.add(ConfigEntryModel(key=key, value=value))
                else:
                    model.value = value
                    model.updated_at = datetime.now(timezone.utc)


class YAMLTemplateSeedLoader:
    """
    Loads default reply templates from YAML.

    Expected shape:

        auto_reply_body: "Hi {merchant_name} ..."
        templates:
          - title: Greeting
            category: general
            body: "Hello {merchant_name}, ..."

    A missing file yields no templates and the built-in acknowledgment.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._data: dict = {}
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            logger.warning(f"Reply template file not found: {self._path}, using defaults")
            self._data = {}
            return

        with open(self._path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationException(f"{self._path} must contain a mapping")
        self._data = data

    @property
    def templates(self) -> List[Template]:
        try:
            return [
                Template(
                    title=item["title"],
                    category=item.get("category", "general"),
                    body=item["body"],
                    id=item.get("id") or f"seed-{index}",
                )
                for index, item in enumerate(self._data.get("templates", []))
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationException(f"Invalid template in {self._path}: {e}") from e

    @property
    def auto_reply_body(self) -> str:
        return self._data.get("auto_reply_body") or DEFAULT_AUTO_REPLY_BODY
