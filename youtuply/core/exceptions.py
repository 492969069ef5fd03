"""Error taxonomy shared by the services, instances and the registry."""

from __future__ import annotations


class YoutuplyError(Exception):
    """Base class for every expected, user-reportable failure."""


class ConfigurationError(YoutuplyError):
    """Required configuration (e.g. Google client credentials) is missing."""


class NotAuthorized(YoutuplyError):
    """No usable credentials for a user; the user has to run setup again."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or "Couldn't load credentials. Please use '!ytp setup' to authorize me."
        )


class AuthError(YoutuplyError):
    """The auth service answered with something unexpected."""


class RefreshFailed(AuthError):
    """Exchanging the refresh token for a new access token was rejected."""

    def __init__(self, detail: str = "") -> None:
        message = "Failed to refresh access token. Please use '!ytp setup' to authorize me again."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.detail = detail


class RequestFailed(YoutuplyError):
    """Non-auth HTTP error returned by the YouTube Data API."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Request failed ({status}): {body}")
        self.status = status
        self.body = body


class MalformedCommand(YoutuplyError):
    """A chat command was issued with invalid parameters."""

    def __init__(self, message: str, usage: str = "") -> None:
        super().__init__(message)
        self.usage = usage


class LoadError(YoutuplyError):
    """A persisted record could not be read or parsed."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Failed to load '{name}': {reason}")
        self.name = name
        self.reason = reason
