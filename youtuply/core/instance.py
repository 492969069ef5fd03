"""Per-user bot instance: command dispatch and passive link scanning."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from youtuply.core.commands import USAGE, Command, parse_command
from youtuply.core.exceptions import MalformedCommand, YoutuplyError
from youtuply.models.instance import BotSettings
from youtuply.models.message import ChatMessage
from youtuply.models.video import VideoRef
from youtuply.services.links import extract_links, playlist_url, url_to_video_id
from youtuply.services.youtube_auth import Failed

if TYPE_CHECKING:
    from youtuply.core.gateway import ChatGateway
    from youtuply.services.youtube_api import CatalogClient
    from youtuply.services.youtube_auth import DeviceAuthFlow

LOGGER = logging.getLogger(__name__)

Handler = Callable[[ChatMessage, Command], Awaitable[None]]

HELP_TEXT = "\n".join(
    [
        "**Youtuply** collects YouTube links into your playlists.",
        f"`{USAGE['setup']}` - authorize me to manage your YouTube playlists",
        f"`{USAGE['connect']}` - add every video posted in this channel to the playlist",
        f"`{USAGE['add']}` - add a single video to a playlist",
        f"`{USAGE['help']}` - show this message",
    ]
)


class BotInstance:
    """One user's bot: routing rules plus the command handlers.

    ``settings.connections`` is only ever changed by ``connect``; every change
    is reported through ``on_settings_changed`` so the owner can persist it.
    """

    def __init__(
        self,
        settings: BotSettings,
        *,
        gateway: ChatGateway,
        catalog: CatalogClient,
        auth: DeviceAuthFlow,
    ) -> None:
        self.settings = settings
        self._gateway = gateway
        self._catalog = catalog
        self._auth = auth
        self._cancel_setup = asyncio.Event()

        # called with this instance after a chat command changed its settings
        self.on_settings_changed: Callable[[BotInstance], Awaitable[None]] | None = None

        self._handlers: dict[str, Handler] = {
            "setup": self.on_setup_request,
            "add": self.on_add_video,
            "connect": self.on_connect_channel,
            "help": self.on_help,
        }

    @property
    def user_id(self) -> str:
        return self.settings.user_id

    def __repr__(self) -> str:
        return f"<BotInstance user={self.user_id} server={self.settings.server_id!r}>"

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def on_message(self, message: ChatMessage) -> None:
        command = parse_command(message.content)
        if command is None:
            await self.scan_message_for_videos(message)
            return

        try:
            handler = self._handlers.get(command.name)
            if handler is None:
                await message.reply(f"Error: Invalid command '{command.name}'")
                await self.on_help(message, command)
                return
            await handler(message, command)
        except MalformedCommand as e:
            await self._reply_malformed(message, e)
        except Exception as e:
            LOGGER.exception(f"Command '{command.name}' failed for user {self.user_id}")
            await self.notify_owner(f"Error processing command: {e}")

    async def _reply_malformed(self, message: ChatMessage, error: MalformedCommand) -> None:
        text = f"Error: {error}"
        if error.usage:
            text += f"\nUsage: `{error.usage}`"
        try:
            await message.reply(text)
        except Exception as e:
            LOGGER.warning(f"Failed to reply to malformed command of user {self.user_id}: {e}")

    async def notify_owner(self, text: str) -> None:
        try:
            await self._gateway.send_direct_message(self.user_id, text)
        except Exception as e:
            LOGGER.error(f"Failed to send error: user '{self.user_id}' is unreachable ({e})")

    # ------------------------------------------------------------------
    # Passive scan
    # ------------------------------------------------------------------

    async def scan_message_for_videos(self, message: ChatMessage) -> None:
        """Add every linked video to the playlist connected to this channel."""
        if message.is_direct_message:
            return
        playlist_id = self.settings.connections.get(message.channel_id)
        if not playlist_id:
            return

        videos = extract_links(message.content)
        for video in videos:
            try:
                await self._catalog.add_video(self.user_id, playlist_id, video)
            except Exception as e:
                LOGGER.warning(f"Failed to add {video.url} for user {self.user_id}: {e}")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def on_setup_request(self, message: ChatMessage, command: Command) -> None:
        async def relay(verification_url: str, user_code: str) -> None:
            await message.reply(
                f"Hi there! Please go to {verification_url} and enter the code '{user_code}'"
            )

        result = await self._auth.authorize(self.user_id, relay, cancel=self._cancel_setup)

        if isinstance(result, Failed):
            await message.reply(f"Something went wrong: {result.describe()}")
        else:
            await message.reply(
                f"Success! Use `{USAGE['connect']}` in a channel to start collecting videos."
            )

    async def on_add_video(self, message: ChatMessage, command: Command) -> None:
        parts = command.params.split()
        if len(parts) != 2:
            raise MalformedCommand("add expects a video URL and a playlist id", USAGE["add"])

        video_url, playlist_id = parts
        video_id = url_to_video_id(video_url)
        if video_id is None:
            raise MalformedCommand(f"'{video_url}' is not a YouTube video link", USAGE["add"])

        LOGGER.info(f"Adding video {video_url} to playlist {playlist_id} for user {self.user_id}")

        try:
            await self._catalog.add_video(self.user_id, playlist_id, VideoRef(video_url, video_id))
        except YoutuplyError as e:
            await message.reply(f"Failed to add video to playlist: {e}")
            return

        await message.reply(f"Added {video_url} to {playlist_url(playlist_id)}")

    async def on_connect_channel(self, message: ChatMessage, command: Command) -> None:
        """``!ytp connect <playlist>``: collect videos posted in this channel."""
        parts = command.params.split()
        if len(parts) != 1:
            raise MalformedCommand("connect expects exactly one playlist id", USAGE["connect"])
        if message.is_direct_message:
            raise MalformedCommand("connect only works in a server channel", USAGE["connect"])

        playlist_id = parts[0]
        self.settings.connections[message.channel_id] = playlist_id

        if self.on_settings_changed is not None:
            await self.on_settings_changed(self)

        await message.reply(
            "Videos posted in this channel will now automatically be added to "
            f"{playlist_url(playlist_id)}"
        )

    async def on_help(self, message: ChatMessage, command: Command) -> None:
        await message.reply(HELP_TEXT)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Called when this instance is replaced; stops a pending device flow."""
        self._cancel_setup.set()
        LOGGER.debug(f"{self!r} shut down")

