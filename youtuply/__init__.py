"""Youtuply: Discord bot that collects posted YouTube links into playlists."""

__version__ = "0.3.0"
