"""
Youtuply Discord Bot
Collects YouTube links posted in Discord channels into YouTube playlists
"""

import asyncio
import logging

import discord
import httpx
from discord.ext import commands
from dotenv import load_dotenv

from youtuply.core.config import PROJECT_DIR, YoutuplySettings, get_settings
from youtuply.core.exceptions import ConfigurationError
from youtuply.core.gateway import DiscordGateway
from youtuply.core.health_server import HealthCheckServer
from youtuply.core.instance import BotInstance
from youtuply.core.logging import setup_logging
from youtuply.core.registry import InstanceRegistry
from youtuply.models.instance import BotSettings
from youtuply.repositories import JsonFileStore, SettingsRepository, TokenStore
from youtuply.services import CatalogClient, DeviceAuthFlow

logger = logging.getLogger("youtuply")


class YoutuplyClient(commands.Bot):
    """Youtuply Discord Bot client"""

    registry: InstanceRegistry

    def __init__(self, settings: YoutuplySettings):
        intents = discord.Intents.default()
        intents.message_content = True  # links are read from message text

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,  # `!ytp help` is handled by the instances
        )

        self.settings = settings
        self.initial_extensions = ["youtuply.cogs.playlist"]
        self.gateway = DiscordGateway(self)
        self.http_client: httpx.AsyncClient | None = None
        self.health_server: HealthCheckServer | None = None

    async def setup_hook(self):
        """Build services, load persisted instances, load cogs"""
        settings = self.settings

        # Fatal if the storage directories cannot be created
        settings_store = JsonFileStore(settings.settings_dir)
        token_store = JsonFileStore(settings.credentials_dir)
        await settings_store.ensure_dir()
        await token_store.ensure_dir()

        try:
            client_id, client_secret = settings.client_credentials()
        except ConfigurationError as e:
            logger.warning(f"{e}; '!ytp setup' will fail until this is fixed")
            client_id, client_secret = "", ""

        self.http_client = httpx.AsyncClient(timeout=settings.http_timeout)
        tokens = TokenStore(token_store)
        auth = DeviceAuthFlow(
            self.http_client,
            tokens,
            client_id,
            client_secret,
            oauth_base=settings.oauth_base_url,
        )
        catalog = CatalogClient(self.http_client, tokens, auth, api_base=settings.youtube_api_url)

        def create_instance(bot_settings: BotSettings) -> BotInstance:
            return BotInstance(bot_settings, gateway=self.gateway, catalog=catalog, auth=auth)

        self.registry = InstanceRegistry(
            SettingsRepository(settings_store),
            create_instance,
            on_load_error=self.notify_load_error,
        )
        await self.registry.load_all()

        for extension in self.initial_extensions:
            await self.load_extension(extension)
        logger.info(f"Loaded extensions: {', '.join(self.initial_extensions)}")

        if settings.health_enabled:
            self.health_server = HealthCheckServer(self, port=settings.port)
            await self.health_server.start()

    async def notify_load_error(self, user_id: str, server_id: str, error: Exception):
        """Tell a user whose settings could not be restored to run setup again"""
        where = f" for server {server_id}" if server_id else ""
        try:
            await self.gateway.send_direct_message(
                user_id,
                f"Sorry, I couldn't restore your settings{where} after a restart. "
                "Please run `!ytp setup` again.",
            )
        except (discord.HTTPException, ValueError) as e:
            logger.warning(f"Could not notify user {user_id} about load error: {e}")

    async def on_ready(self):
        logger.info(f"Bot ready: {self.user} (ID: {self.user.id})")
        logger.info(
            f"Connected to {len(self.guilds)} server(s) | "
            f"{len(self.registry)} instance(s) | discord.py {discord.__version__}"
        )

    async def close(self):
        if self.health_server:
            await self.health_server.stop()
        if self.http_client:
            await self.http_client.aclose()
        await super().close()


async def main():
    """Bot entry point"""
    load_dotenv(dotenv_path=PROJECT_DIR / ".env", encoding="utf-8")
    settings = get_settings()
    setup_logging(settings.log_level)

    if not settings.discord_bot_token:
        logger.error("DISCORD_BOT_TOKEN is not set")
        logger.error("Set it in the environment or in .env: DISCORD_BOT_TOKEN=your_token_here")
        return

    async with YoutuplyClient(settings) as bot:
        try:
            await bot.start(settings.discord_bot_token)
        except (KeyboardInterrupt, asyncio.CancelledError):
            if not bot.is_closed():
                await bot.close()


def run():
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Bot stopped")
    except Exception as e:
        logger.error(f"Bot crashed: {e}", exc_info=e)
        raise


if __name__ == "__main__":
    run()
