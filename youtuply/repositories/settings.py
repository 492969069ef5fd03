"""Repository for per-instance bot settings records.

Records are named ``<serverId>_<userId>``. Records written by older versions
are named after the user id alone and still load.
"""

from __future__ import annotations

import logging

from youtuply.core.exceptions import LoadError
from youtuply.models.instance import BotSettings
from youtuply.repositories.storage import JsonFileStore

logger = logging.getLogger(__name__)


def record_name(settings: BotSettings) -> str:
    """File name (without suffix) under which ``settings`` are stored."""
    if settings.server_id:
        return f"{settings.server_id}_{settings.user_id}"
    return settings.user_id


def parse_record_name(name: str) -> tuple[str, str]:
    """Best-effort split of a record name into ``(server_id, user_id)``.

    Discord ids never contain underscores, so the last underscore separates
    the two parts. Legacy names yield an empty server id.
    """
    server_id, sep, user_id = name.rpartition("_")
    if not sep or not user_id:
        return "", name
    return server_id, user_id


class SettingsRepository:
    """Reads and writes ``BotSettings`` records in a ``JsonFileStore``."""

    def __init__(self, store: JsonFileStore) -> None:
        self._store = store

    async def list_records(self) -> list[str]:
        return await self._store.list_names()

    async def load(self, name: str) -> BotSettings:
        """Load one record. Any read or parse failure becomes ``LoadError``."""
        server_id, user_id = parse_record_name(name)
        try:
            data = await self._store.load(name)
            return BotSettings.from_dict(data, user_id=user_id, server_id=server_id)
        except (OSError, ValueError, TypeError) as e:
            raise LoadError(name, str(e)) from e

    async def save(self, settings: BotSettings) -> str:
        name = record_name(settings)
        await self._store.save(name, settings.to_dict())
        return name

    async def delete(self, name: str) -> bool:
        return await self._store.delete(name)
