"""
Playlist Cog
Feeds every message the bot can see into the instance registry
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from youtuply.models.message import ChatMessage

if TYPE_CHECKING:
    from youtuply.bot import YoutuplyClient

logger = logging.getLogger(__name__)


def to_chat_message(message: discord.Message) -> ChatMessage:
    """Convert a discord.py message into the registry's message type."""
    channel = message.channel
    is_dm = isinstance(channel, discord.DMChannel)
    recipient = channel.recipient if is_dm else None

    return ChatMessage(
        content=message.content,
        author_id=str(message.author.id),
        channel_id=str(channel.id),
        reply=message.reply,
        guild_id=str(message.guild.id) if message.guild else None,
        guild_name=message.guild.name if message.guild else "",
        is_direct_message=is_dm,
        recipient_id=str(recipient.id) if recipient else None,
    )


class Playlist(commands.Cog):
    """YouTube playlist collection"""

    def __init__(self, bot: YoutuplyClient):
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.author.bot:
            return

        try:
            await self.bot.registry.route(to_chat_message(message))
        except Exception as e:
            logger.error(
                f"Failed to route message {message.id} from user {message.author.id}: {e}",
                exc_info=e,
            )


async def setup(bot: YoutuplyClient):
    await bot.add_cog(Playlist(bot))
