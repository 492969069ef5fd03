"""Data model for a user's persisted bot settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class BotSettings:
    """Settings record owned by exactly one bot instance."""

    user_id: str
    server_id: str = ""
    server_name: str = ""
    # channel_id -> playlist_id, one playlist per channel
    connections: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "serverId": self.server_id,
            "serverName": self.server_name,
            "connections": dict(self.connections),
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        user_id: str = "",
        server_id: str = "",
    ) -> BotSettings:
        """Build settings from their JSON form.

        ``user_id``/``server_id`` are fallbacks taken from the record's file
        name; values stored in the record itself take precedence. Older
        records carry the server name under ``server`` and have no id.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")

        resolved_user = str(data.get("userId") or user_id)
        if not resolved_user:
            raise ValueError("record has no userId")

        connections = data.get("connections") or {}
        if not isinstance(connections, dict):
            raise ValueError("connections must be an object")

        return cls(
            user_id=resolved_user,
            server_id=str(data.get("serverId") or server_id),
            server_name=str(data.get("serverName") or data.get("server") or ""),
            connections={str(k): str(v) for k, v in connections.items()},
        )
