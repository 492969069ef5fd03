import unittest
from unittest.mock import MagicMock

from aiohttp import test_utils

from youtuply.core.health_server import HealthCheckServer


class HealthCheckServerTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.bot = MagicMock()
        self.bot.is_ready.return_value = True
        self.bot.user.id = 1234
        self.bot.guilds = [object(), object()]
        self.bot.registry.stats.return_value = {
            "instances": 3,
            "connected_channels": 4,
            "playlists": 2,
        }
        self.server = HealthCheckServer(self.bot)
        self.client = test_utils.TestClient(test_utils.TestServer(self.server.app))
        await self.client.start_server()

    async def asyncTearDown(self) -> None:
        await self.client.close()

    async def test_status_reports_playlist_counts(self) -> None:
        response = await self.client.get("/status")
        data = await response.json()

        self.assertEqual(response.status, 200)
        self.assertEqual(data["service"], "Youtuply")
        self.assertTrue(data["ready"])
        self.assertEqual(data["bot_id"], "1234")
        self.assertEqual(data["guilds"], 2)
        self.assertEqual(
            (data["instances"], data["connected_channels"], data["playlists"]), (3, 4, 2)
        )

    async def test_health_when_ready(self) -> None:
        response = await self.client.get("/health")

        self.assertEqual(response.status, 200)
        self.assertEqual(await response.json(), {"status": "healthy", "ready": True})

    async def test_health_while_starting(self) -> None:
        self.bot.is_ready.return_value = False

        response = await self.client.get("/health")

        self.assertEqual(response.status, 503)
        self.assertEqual(await response.json(), {"status": "starting", "ready": False})

    def test_snapshot_before_registry_exists(self) -> None:
        bot = MagicMock(spec=["is_ready", "user", "guilds"])
        bot.is_ready.return_value = False

        status = HealthCheckServer(bot).snapshot()

        self.assertEqual(status["instances"], 0)
        self.assertEqual(status["guilds"], 0)
        self.assertIsNone(status["bot_id"])


if __name__ == "__main__":
    unittest.main()
