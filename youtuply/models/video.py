"""Data model for a recognized video link."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class VideoRef:
    """A YouTube URL found in a message plus its video id."""

    url: str
    video_id: str
