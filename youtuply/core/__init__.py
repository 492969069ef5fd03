"""Core modules for Youtuply."""

from .config import BOT_NAME, DATA_DIR, PACKAGE_DIR, YoutuplySettings, get_settings
from .exceptions import (
    AuthError,
    ConfigurationError,
    LoadError,
    MalformedCommand,
    NotAuthorized,
    RefreshFailed,
    RequestFailed,
    YoutuplyError,
)
from .logging import setup_logging

__all__ = [
    # Config
    "YoutuplySettings",
    "get_settings",
    "BOT_NAME",
    # Paths
    "PACKAGE_DIR",
    "DATA_DIR",
    # Errors
    "YoutuplyError",
    "AuthError",
    "ConfigurationError",
    "LoadError",
    "MalformedCommand",
    "NotAuthorized",
    "RefreshFailed",
    "RequestFailed",
    # Logging
    "setup_logging",
]
