"""YouTube link recognition.

Pure string parsing, shared by the passive channel scan and ``!ytp add``.
"""

from __future__ import annotations

import re

from youtuply.models.video import VideoRef

_YT_RE = re.compile(
    r"https?://(?:www\.|m\.)?(?:"
    r"youtube\.com/watch\?(?:[^\s#]*&)?v=|"
    r"youtu\.be/|"
    r"youtube\.com/shorts/"
    r")([A-Za-z0-9_-]{11})\S*",
    re.IGNORECASE,
)


def extract_links(text: str) -> list[VideoRef]:
    """Return every YouTube link in ``text`` in order of appearance."""
    if not text:
        return []
    return [VideoRef(url=m.group(0), video_id=m.group(1)) for m in _YT_RE.finditer(text)]


def url_to_video_id(url: str) -> str | None:
    """Extract the 11-char video id from a URL. Returns None if not found."""
    m = _YT_RE.search(url or "")
    return m.group(1) if m else None


def playlist_url(playlist_id: str) -> str:
    return f"https://www.youtube.com/playlist?list={playlist_id}"
