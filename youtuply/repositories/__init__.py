"""Persistence layer for Youtuply."""

from .settings import SettingsRepository, parse_record_name, record_name
from .storage import JsonFileStore
from .token import TokenStore

__all__ = [
    "JsonFileStore",
    "SettingsRepository",
    "TokenStore",
    "parse_record_name",
    "record_name",
]
