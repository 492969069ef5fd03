"""Google OAuth 2.0 device authorization grant for YouTube.

See https://developers.google.com/youtube/v3/guides/auth/devices

Flow:
    1. Request a device code, a verification URL and a user code.
    2. Hand URL and code to the caller so the user can be prompted.
    3. Poll the token endpoint until the user approves, denies, or the code
       expires.
    4. Store the issued tokens in the TokenStore.

Expected outcomes are returned as ``Authorized`` / ``Failed``; only transport
errors (``httpx.TransportError``) propagate.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from youtuply.core.exceptions import ConfigurationError, RefreshFailed
from youtuply.models.token import RefreshCredentials, TokenRecord
from youtuply.repositories.token import TokenStore

logger = logging.getLogger(__name__)

OAUTH_BASE = "https://oauth2.googleapis.com"
YOUTUBE_SCOPE = "https://www.googleapis.com/auth/youtube"
DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"

# RFC 8628 §3.5: back off by 5 seconds on slow_down
_SLOW_DOWN_STEP = 5


class AuthFailure(str, Enum):
    USER_DENIED = "user denied access"
    AUTH_ERROR = "auth error"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass
class Authorized:
    record: TokenRecord


@dataclass
class Failed:
    reason: AuthFailure
    detail: str = ""

    def describe(self) -> str:
        if self.detail and self.detail != self.reason.value:
            return f"{self.reason.value}: {self.detail}"
        return self.reason.value


AuthResult = Authorized | Failed
VerificationCallback = Callable[[str, str], Awaitable[Any]]


def _payload(response: httpx.Response) -> Any:
    """Decoded JSON body, or the raw text when it isn't JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_code(payload: Any) -> str:
    if isinstance(payload, dict):
        return str(payload.get("error") or "")
    return ""


class DeviceAuthFlow:
    """Runs the device flow and the refresh-token exchange.

    ``sleep`` and ``clock`` are injectable so polling can be driven without
    real waiting.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        token_store: TokenStore,
        client_id: str,
        client_secret: str,
        *,
        oauth_base: str = OAUTH_BASE,
        scope: str = YOUTUBE_SCOPE,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http
        self._tokens = token_store
        self.client_id = client_id
        self.client_secret = client_secret
        self._oauth_base = oauth_base.rstrip("/")
        self._scope = scope
        self._sleep = sleep
        self._clock = clock

    @property
    def token_url(self) -> str:
        return f"{self._oauth_base}/token"

    # ------------------------------------------------------------------
    # Device flow
    # ------------------------------------------------------------------

    async def authorize(
        self,
        user_id: str,
        callback: VerificationCallback,
        *,
        cancel: asyncio.Event | None = None,
    ) -> AuthResult:
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("YouTube client credentials are not configured")

        started = self._clock()
        response = await self._http.post(
            f"{self._oauth_base}/device/code",
            data={"client_id": self.client_id, "scope": self._scope},
        )
        payload = _payload(response)
        if not response.is_success or not isinstance(payload, dict):
            logger.error(f"Device code request failed: {response.status_code}")
            return Failed(AuthFailure.AUTH_ERROR, str(payload))

        try:
            verification_url = payload["verification_url"]
            user_code = payload["user_code"]
            device_code = payload["device_code"]
        except KeyError as e:
            return Failed(AuthFailure.AUTH_ERROR, f"device code response is missing {e}")
        interval = float(payload.get("interval") or 5)
        expires_in = float(payload.get("expires_in") or 1800)
        deadline = started + expires_in

        logger.info(f"User {user_id}: go to {verification_url} and enter '{user_code}'")
        await callback(verification_url, user_code)

        while True:
            logger.debug(f"Waiting for user {user_id} to authorize...")
            await self._sleep(interval)

            if cancel is not None and cancel.is_set():
                logger.info(f"Device flow for user {user_id} cancelled")
                return Failed(AuthFailure.CANCELLED, "setup was replaced by a newer request")

            response = await self._http.post(
                self.token_url,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "device_code": device_code,
                    "grant_type": DEVICE_CODE_GRANT,
                },
            )
            payload = _payload(response)

            if response.is_success:
                return await self._store_tokens(user_id, payload)

            error = _error_code(payload)
            if error == "slow_down":
                interval += _SLOW_DOWN_STEP
            elif response.status_code == 428 or error == "authorization_pending":
                pass
            elif response.status_code == 403 or error == "access_denied":
                logger.info(f"User {user_id} denied access")
                return Failed(AuthFailure.USER_DENIED, AuthFailure.USER_DENIED.value)
            elif error == "expired_token":
                return Failed(AuthFailure.TIMEOUT, AuthFailure.TIMEOUT.value)
            else:
                logger.error(f"Unexpected token response {response.status_code}: {payload}")
                return Failed(AuthFailure.AUTH_ERROR, str(payload))

            if self._clock() >= deadline:
                break

        logger.info(f"Device flow for user {user_id} timed out")
        return Failed(AuthFailure.TIMEOUT, AuthFailure.TIMEOUT.value)

    async def _store_tokens(self, user_id: str, payload: Any) -> AuthResult:
        data = payload if isinstance(payload, dict) else {}
        access_token = data.get("access_token")
        refresh_token = data.get("refresh_token")
        if not access_token or not refresh_token:
            return Failed(AuthFailure.AUTH_ERROR, f"incomplete token response: {payload}")

        record = TokenRecord(
            access_token=access_token,
            refresh=RefreshCredentials(
                client_id=self.client_id,
                client_secret=self.client_secret,
                refresh_token=refresh_token,
            ),
        )
        await self._tokens.put(user_id, record)
        logger.info(f"User {user_id} authorized")
        return Authorized(record)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh_access_token(self, record: TokenRecord) -> str:
        """Exchange the record's refresh token for a new access token.

        Raises RefreshFailed when the exchange is rejected; the user then has
        to go through the device flow again.
        """
        response = await self._http.post(
            self.token_url,
            data={
                "client_id": record.refresh.client_id,
                "client_secret": record.refresh.client_secret,
                "grant_type": RefreshCredentials.grant_type,
                "refresh_token": record.refresh.refresh_token,
            },
        )
        payload = _payload(response)
        if not response.is_success:
            logger.error(f"Token refresh failed: {response.status_code}")
            raise RefreshFailed(_error_code(payload) or f"HTTP {response.status_code}")

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not access_token:
            raise RefreshFailed("no access_token in refresh response")

        logger.debug("Refreshed user access token")
        return access_token
