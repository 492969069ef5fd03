"""External service clients and pure helpers."""

from .links import extract_links, playlist_url, url_to_video_id
from .youtube_api import CatalogClient
from .youtube_auth import AuthFailure, Authorized, DeviceAuthFlow, Failed

__all__ = [
    "AuthFailure",
    "Authorized",
    "CatalogClient",
    "DeviceAuthFlow",
    "Failed",
    "extract_links",
    "playlist_url",
    "url_to_video_id",
]
