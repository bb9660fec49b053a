"""Audio infrastructure - yt-dlp search and stream extraction."""

from discord_jukebox.infrastructure.audio.models import (
    AudioFormatInfo,
    CacheEntry,
    YtDlpEntry,
    YtDlpOpts,
)
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "YtDlpEntry",
    "YtDlpOpts",
    "YtDlpResolver",
]
