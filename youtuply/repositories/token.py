"""Per-user OAuth token cache backed by JSON files."""

from __future__ import annotations

import asyncio
import logging

from youtuply.core.exceptions import NotAuthorized
from youtuply.models.token import TokenRecord
from youtuply.repositories.storage import JsonFileStore

logger = logging.getLogger(__name__)


class TokenStore:
    """Caches token records in memory and persists them per user.

    A record is either fully present or absent: unreadable or incomplete
    files are reported as ``NotAuthorized`` just like missing ones.
    """

    def __init__(self, store: JsonFileStore) -> None:
        self._store = store
        self._cache: dict[str, TokenRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, user_id: str) -> asyncio.Lock:
        if user_id not in self._locks:
            self._locks[user_id] = asyncio.Lock()
        return self._locks[user_id]

    async def get(self, user_id: str) -> TokenRecord:
        record = self._cache.get(user_id)
        if record is not None:
            return record

        # Double-checked so concurrent callers load the file only once
        async with self._get_lock(user_id):
            record = self._cache.get(user_id)
            if record is not None:
                return record

            try:
                data = await self._store.load(user_id)
                record = TokenRecord.from_dict(data)
            except FileNotFoundError:
                raise NotAuthorized() from None
            except ValueError as e:
                logger.warning(f"Ignoring unusable credentials of user {user_id}: {e}")
                raise NotAuthorized() from e

            self._cache[user_id] = record
            return record

    async def put(self, user_id: str, record: TokenRecord) -> None:
        """Persist first; the cache only changes once the write succeeded."""
        await self._store.save(user_id, record.to_dict())
        self._cache[user_id] = record
        logger.info(f"Stored credentials for user {user_id}")

    async def update_access_token(self, user_id: str, access_token: str) -> TokenRecord:
        """Replace the access token of the cached record in place (memory only)."""
        record = await self.get(user_id)
        record.access_token = access_token
        return record
