"""Data models for Youtuply."""

from .instance import BotSettings
from .message import ChatMessage
from .token import RefreshCredentials, TokenRecord
from .video import VideoRef

__all__ = [
    "BotSettings",
    "ChatMessage",
    "RefreshCredentials",
    "TokenRecord",
    "VideoRef",
]
