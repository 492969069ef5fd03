import json
import tempfile
import unittest
from pathlib import Path

import httpx

from youtuply.core.exceptions import NotAuthorized, RefreshFailed, RequestFailed
from youtuply.models.token import RefreshCredentials, TokenRecord
from youtuply.models.video import VideoRef
from youtuply.repositories.storage import JsonFileStore
from youtuply.repositories.token import TokenStore
from youtuply.services.youtube_api import CatalogClient
from youtuply.services.youtube_auth import DeviceAuthFlow

VIDEO = VideoRef(url="https://youtu.be/dQw4w9WgXcQ", video_id="dQw4w9WgXcQ")


class CatalogClientTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tokens = TokenStore(JsonFileStore(Path(self._tmp.name)))
        await self.tokens.put(
            "U1",
            TokenRecord(
                access_token="old-token",
                refresh=RefreshCredentials(
                    client_id="client", client_secret="secret", refresh_token="refresh"
                ),
            ),
        )

        self.playlist_responses: list[httpx.Response] = []
        self.refresh_responses: list[httpx.Response] = []
        self.playlist_requests: list[httpx.Request] = []
        self.refresh_requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/token":
                self.refresh_requests.append(request)
                return self.refresh_responses.pop(0)
            self.playlist_requests.append(request)
            return self.playlist_responses.pop(0)

        self.http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        auth = DeviceAuthFlow(self.http, self.tokens, "client", "secret")
        self.catalog = CatalogClient(self.http, self.tokens, auth)

    async def asyncTearDown(self) -> None:
        await self.http.aclose()
        self._tmp.cleanup()

    async def test_add_video_posts_playlist_item(self) -> None:
        self.playlist_responses = [httpx.Response(200, json={"id": "item-1"})]

        result = await self.catalog.add_video("U1", "PL123", VIDEO)

        self.assertEqual(result, {"id": "item-1"})
        request = self.playlist_requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url.path, "/youtube/v3/playlistItems")
        self.assertEqual(request.url.params["part"], "snippet")
        self.assertEqual(request.headers["Authorization"], "Bearer old-token")
        self.assertEqual(
            json.loads(request.content),
            {
                "snippet": {
                    "playlistId": "PL123",
                    "position": 0,
                    "resourceId": {"kind": "youtube#video", "videoId": "dQw4w9WgXcQ"},
                }
            },
        )

    async def test_unauthorized_once_refreshes_and_retries(self) -> None:
        self.playlist_responses = [
            httpx.Response(401, json={"error": "expired"}),
            httpx.Response(200, json={"id": "item-1"}),
        ]
        self.refresh_responses = [httpx.Response(200, json={"access_token": "new-token"})]

        result = await self.catalog.add_video("U1", "PL123", VIDEO)

        self.assertEqual(result, {"id": "item-1"})
        self.assertEqual(len(self.refresh_requests), 1)
        self.assertEqual(len(self.playlist_requests), 2)
        self.assertEqual(self.playlist_requests[1].headers["Authorization"], "Bearer new-token")
        self.assertEqual((await self.tokens.get("U1")).access_token, "new-token")

    async def test_unauthorized_twice_gives_up(self) -> None:
        self.playlist_responses = [
            httpx.Response(401),
            httpx.Response(403),
            httpx.Response(200, json={"id": "never"}),
        ]
        self.refresh_responses = [httpx.Response(200, json={"access_token": "new-token"})]

        with self.assertRaises(NotAuthorized):
            await self.catalog.add_video("U1", "PL123", VIDEO)

        self.assertEqual(len(self.refresh_requests), 1)
        self.assertEqual(len(self.playlist_requests), 2)

    async def test_rejected_refresh(self) -> None:
        self.playlist_responses = [httpx.Response(403)]
        self.refresh_responses = [httpx.Response(400, json={"error": "invalid_grant"})]

        with self.assertRaises(RefreshFailed):
            await self.catalog.add_video("U1", "PL123", VIDEO)

        self.assertEqual(len(self.playlist_requests), 1)
        self.assertEqual((await self.tokens.get("U1")).access_token, "old-token")

    async def test_other_errors_carry_response_body(self) -> None:
        self.playlist_responses = [httpx.Response(404, text="playlistNotFound")]

        with self.assertRaises(RequestFailed) as ctx:
            await self.catalog.add_video("U1", "PL-missing", VIDEO)

        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.body, "playlistNotFound")
        self.assertEqual(self.refresh_requests, [])

    async def test_unknown_user_is_not_authorized(self) -> None:
        with self.assertRaises(NotAuthorized):
            await self.catalog.add_video("U2", "PL123", VIDEO)

        self.assertEqual(self.playlist_requests, [])


if __name__ == "__main__":
    unittest.main()
