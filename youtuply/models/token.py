"""Data model for stored YouTube OAuth credentials."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RefreshCredentials:
    """Everything needed to exchange a refresh token for a new access token."""

    client_id: str
    client_secret: str
    refresh_token: str

    grant_type = "refresh_token"


@dataclass
class TokenRecord:
    """OAuth token record, one per user.

    Only ``access_token`` is ever replaced after the record is issued.
    """

    access_token: str
    refresh: RefreshCredentials

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh": {
                "client_id": self.refresh.client_id,
                "client_secret": self.refresh.client_secret,
                "grant_type": RefreshCredentials.grant_type,
                "refresh_token": self.refresh.refresh_token,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TokenRecord:
        """Parse a stored record. Raises ValueError if any field is missing."""
        refresh = data.get("refresh") if isinstance(data, dict) else None
        if not isinstance(refresh, dict):
            raise ValueError("record has no refresh credentials")

        values = {
            "access_token": data.get("access_token"),
            "client_id": refresh.get("client_id"),
            "client_secret": refresh.get("client_secret"),
            "refresh_token": refresh.get("refresh_token"),
        }
        missing = [key for key, value in values.items() if not value]
        if missing:
            raise ValueError(f"record is missing {', '.join(missing)}")

        return cls(
            access_token=str(values["access_token"]),
            refresh=RefreshCredentials(
                client_id=str(values["client_id"]),
                client_secret=str(values["client_secret"]),
                refresh_token=str(values["refresh_token"]),
            ),
        )
