"""Outbound side of the chat platform."""

from __future__ import annotations

from typing import Protocol

import discord


class ChatGateway(Protocol):
    async def send_direct_message(self, user_id: str, text: str) -> None: ...


class DiscordGateway:
    """Delivers direct messages through a discord.py client.

    Raises discord.NotFound / discord.HTTPException / ValueError if the user
    cannot be resolved or reached; callers decide whether that matters.
    """

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    async def send_direct_message(self, user_id: str, text: str) -> None:
        user = self.client.get_user(int(user_id)) or await self.client.fetch_user(int(user_id))
        await user.send(text)
