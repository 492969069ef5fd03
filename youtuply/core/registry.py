"""Process-wide registry of bot instances, one per user.

Owns loading/saving of instance settings and routes every inbound message to
the instances that should see it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from youtuply.core.commands import is_setup_request
from youtuply.core.exceptions import LoadError
from youtuply.core.instance import BotInstance
from youtuply.models.instance import BotSettings
from youtuply.models.message import ChatMessage
from youtuply.repositories.settings import SettingsRepository, parse_record_name, record_name

LOGGER = logging.getLogger(__name__)

InstanceFactory = Callable[[BotSettings], BotInstance]
# (user_id, server_id, error)
LoadErrorHook = Callable[[str, str, Exception], Awaitable[None]]


class InstanceRegistry:
    """Maps user ids to their ``BotInstance``.

    Created once at startup and handed to whatever drives the message loop.
    Entries are only replaced by a new setup, never evicted.
    """

    def __init__(
        self,
        repository: SettingsRepository,
        instance_factory: InstanceFactory,
        *,
        on_load_error: LoadErrorHook | None = None,
    ) -> None:
        self._repository = repository
        self._factory = instance_factory
        self._on_load_error = on_load_error
        self._instances: dict[str, BotInstance] = {}
        # user_id -> name of the record the instance was loaded from / saved to
        self._record_names: dict[str, str] = {}
        self._load_lock = asyncio.Lock()
        self._loaded = False

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._instances

    def get(self, user_id: str) -> BotInstance | None:
        return self._instances.get(user_id)

    def stats(self) -> dict[str, int]:
        """Counts for health reporting."""
        connections = [
            playlist_id
            for instance in self._instances.values()
            for playlist_id in instance.settings.connections.values()
        ]
        return {
            "instances": len(self._instances),
            "connected_channels": len(connections),
            "playlists": len(set(connections)),
        }

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_all(self) -> int:
        """Register an instance for every persisted settings record.

        Runs once; later calls are no-ops. Broken records are reported through
        ``on_load_error`` and skipped. Returns the number of loaded instances.
        """
        async with self._load_lock:
            if self._loaded:
                return 0

            loaded = 0
            for name in await self._repository.list_records():
                try:
                    settings = await self._repository.load(name)
                except LoadError as e:
                    server_id, user_id = parse_record_name(name)
                    LOGGER.error(f"Failed to load settings of user {user_id}: {e.reason}")
                    await self._report_load_error(user_id, server_id, e)
                    continue

                if settings.user_id in self._instances:
                    LOGGER.warning(
                        f"Duplicate settings for user {settings.user_id}: "
                        f"'{name}' replaces '{self._record_names[settings.user_id]}'"
                    )
                self._register(self._create(settings), name)
                loaded += 1

            self._loaded = True
            LOGGER.info(f"Loaded {loaded} bot instance(s)")
            return loaded

    async def _report_load_error(self, user_id: str, server_id: str, error: Exception) -> None:
        if self._on_load_error is None:
            return
        try:
            await self._on_load_error(user_id, server_id, error)
        except Exception as e:
            LOGGER.warning(f"Load error hook failed for user {user_id}: {e}")

    # ------------------------------------------------------------------
    # Instance management
    # ------------------------------------------------------------------

    def _create(self, settings: BotSettings) -> BotInstance:
        instance = self._factory(settings)
        instance.on_settings_changed = self.persist
        return instance

    def _register(self, instance: BotInstance, record: str | None = None) -> None:
        previous = self._instances.get(instance.user_id)
        if previous is not None and previous is not instance:
            previous.shutdown()
        self._instances[instance.user_id] = instance
        if record is not None:
            self._record_names[instance.user_id] = record

    async def persist(self, instance: BotInstance) -> None:
        """Write the instance's settings; drop the user's outdated record file."""
        name = await self._repository.save(instance.settings)
        old_name = self._record_names.get(instance.user_id)
        self._record_names[instance.user_id] = name
        if old_name and old_name != name:
            try:
                await self._repository.delete(old_name)
                LOGGER.debug(f"Removed outdated settings record '{old_name}'")
            except OSError as e:
                LOGGER.warning(f"Could not remove outdated settings record '{old_name}': {e}")
        LOGGER.debug(f"Persisted settings of user {instance.user_id} as '{name}'")

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def route(self, message: ChatMessage) -> None:
        if is_setup_request(message.content):
            await self._handle_setup(message)
            return

        if message.is_direct_message:
            targets: list[BotInstance] = []
            for user_id in (message.recipient_id, message.author_id):
                instance = self._instances.get(user_id) if user_id else None
                if instance is not None and instance not in targets:
                    targets.append(instance)
            for instance in targets:
                await instance.on_message(message)
            return

        # Every instance sees every channel message and decides on its own
        # whether to react. There is no per-server permission check.
        instances = list(self._instances.values())
        results = await asyncio.gather(
            *(instance.on_message(message) for instance in instances),
            return_exceptions=True,
        )
        for instance, result in zip(instances, results):
            if isinstance(result, Exception):
                LOGGER.error(f"{instance!r} failed to handle message: {result}", exc_info=result)

    async def _handle_setup(self, message: ChatMessage) -> None:
        settings = BotSettings(
            user_id=message.author_id,
            server_id=message.guild_id or "",
            server_name=message.guild_name,
        )
        instance = self._create(settings)

        # Saved before the swap so a failed write keeps the current instance
        try:
            await self.persist(instance)
        except OSError as e:
            LOGGER.error(f"Failed to save settings of user {message.author_id}: {e}")
            await instance.notify_owner(
                f"Error processing command: couldn't save your settings ({e})"
            )
            return

        previous = self._instances.get(message.author_id)
        if previous is not None:
            LOGGER.info(f"Replacing bot instance of user {message.author_id}")
        self._register(instance)
        LOGGER.info(f"Created bot instance for user {message.author_id} ({record_name(settings)})")

        await instance.on_message(message)
