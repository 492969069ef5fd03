"""HTTP health endpoints for the hosting platform"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from aiohttp import web

from youtuply.core.config import BOT_NAME

if TYPE_CHECKING:
    from youtuply.bot import YoutuplyClient

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 300


class HealthCheckServer:
    """Serves ``/health`` (readiness) and ``/status`` (bot and playlist counts)"""

    def __init__(
        self, bot: "YoutuplyClient | None" = None, host: str = "0.0.0.0", port: int = 8080
    ) -> None:
        self.bot: Any = bot
        self.host = host
        self.port = port
        self.app = web.Application()
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/status", self.handle_status)
        self.runner: web.AppRunner | None = None
        self._start_time = time.time()
        self._heartbeat_task: asyncio.Task | None = None

    def _is_ready(self) -> bool:
        return self.bot is not None and self.bot.is_ready()

    def snapshot(self) -> dict[str, Any]:
        ready = self._is_ready()
        registry = getattr(self.bot, "registry", None)
        stats = registry.stats() if registry is not None else {}
        return {
            "service": BOT_NAME,
            "ready": ready,
            "bot_id": str(self.bot.user.id) if ready and self.bot.user else None,
            "uptime_seconds": int(time.time() - self._start_time),
            "guilds": len(self.bot.guilds) if ready else 0,
            "instances": stats.get("instances", 0),
            "connected_channels": stats.get("connected_channels", 0),
            "playlists": stats.get("playlists", 0),
        }

    async def handle_health(self, request: web.Request) -> web.Response:
        """503 until the Discord connection is ready"""
        ready = self._is_ready()
        return web.json_response(
            {"status": "healthy" if ready else "starting", "ready": ready},
            status=200 if ready else 503,
        )

    async def handle_status(self, request: web.Request) -> web.Response:
        return web.json_response(self.snapshot())

    async def _heartbeat(self) -> None:
        while True:
            await asyncio.sleep(HEARTBEAT_INTERVAL)
            status = self.snapshot()
            logger.info(
                f"Heartbeat: uptime={status['uptime_seconds']}s, ready={status['ready']}, "
                f"instances={status['instances']}, channels={status['connected_channels']}, "
                f"playlists={status['playlists']}"
            )

    async def start(self) -> None:
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        await web.TCPSite(self.runner, self.host, self.port).start()
        self._heartbeat_task = asyncio.create_task(self._heartbeat())
        logger.info(f"Health server listening on {self.host}:{self.port}")

    async def stop(self) -> None:
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
        if self.runner:
            try:
                await self.runner.cleanup()
                logger.info("Health server stopped")
            except Exception as e:
                logger.exception(f"Error stopping health server: {e}")
