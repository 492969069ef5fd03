"""YouTube Data API v3 client for playlist mutations."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from youtuply.core.exceptions import NotAuthorized, RequestFailed
from youtuply.models.token import TokenRecord
from youtuply.models.video import VideoRef
from youtuply.repositories.token import TokenStore
from youtuply.services.links import playlist_url
from youtuply.services.youtube_auth import DeviceAuthFlow

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"

_AUTH_STATUSES = (401, 403)


class CatalogClient:
    """Authorized calls against the user's own YouTube account.

    A rejected access token is refreshed exactly once and the request retried
    exactly once; a second rejection is reported, never retried again.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token_store: TokenStore,
        auth: DeviceAuthFlow,
        *,
        api_base: str = YOUTUBE_API_BASE,
    ) -> None:
        self._http = http
        self._tokens = token_store
        self._auth = auth
        self._api_base = api_base.rstrip("/")

    async def add_video(self, user_id: str, playlist_id: str, video: VideoRef) -> dict[str, Any]:
        """Insert ``video`` at the top of ``playlist_id``. Returns the playlist item."""
        body = {
            "snippet": {
                "playlistId": playlist_id,
                "position": 0,
                "resourceId": {"kind": "youtube#video", "videoId": video.video_id},
            }
        }
        response = await self._authorized_post(user_id, "playlistItems?part=snippet", body)
        logger.info(f"Added {video.url} to playlist {playlist_url(playlist_id)}")
        return response.json()

    async def _authorized_post(
        self, user_id: str, path: str, json_body: dict[str, Any]
    ) -> httpx.Response:
        record = await self._tokens.get(user_id)
        response = await self._post(path, record, json_body)

        if response.status_code in _AUTH_STATUSES:
            logger.debug(f"Access token of user {user_id} rejected, refreshing")
            access_token = await self._auth.refresh_access_token(record)
            record = await self._tokens.update_access_token(user_id, access_token)
            response = await self._post(path, record, json_body)

            if response.status_code in _AUTH_STATUSES:
                logger.warning(f"User {user_id} still unauthorized after token refresh")
                raise NotAuthorized(
                    "YouTube rejected my credentials. Please use '!ytp setup' to authorize me again."
                )

        if not response.is_success:
            raise RequestFailed(response.status_code, response.text)

        return response

    async def _post(
        self, path: str, record: TokenRecord, json_body: dict[str, Any]
    ) -> httpx.Response:
        return await self._http.post(
            f"{self._api_base}/{path}",
            json=json_body,
            headers={
                "Authorization": f"Bearer {record.access_token}",
                "Accept": "application/json",
            },
        )
