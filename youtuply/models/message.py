"""Platform-neutral view of an inbound chat message."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ChatMessage:
    """Inbound message as seen by the registry and bot instances.

    ``reply`` posts a response in the channel the message came from.
    """

    content: str
    author_id: str
    channel_id: str
    reply: Callable[[str], Awaitable[Any]] = field(repr=False)
    guild_id: str | None = None
    guild_name: str = ""
    is_direct_message: bool = False
    # For direct messages: the other participant of the DM channel
    recipient_id: str | None = None
