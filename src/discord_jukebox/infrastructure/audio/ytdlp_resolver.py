"""Search and streaming services backed by yt-dlp."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_jukebox.application.interfaces.track_resolver import SearchService, StreamingService
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import AudioStream, TrackReference
from discord_jukebox.domain.shared.exceptions import PlaybackError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

from .models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    LOG_URL_TRUNCATE,
    AudioFormatInfo,
    CacheEntry,
    YtDlpEntry,
    YtDlpOpts,
)

logger = logging.getLogger(__name__)

YOUTUBE_ID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:youtube\.com/watch\?(?:[^#\s]*&)?v=|youtube\.com/shorts/|youtube\.com/embed/|youtu\.be/)"
    r"([a-zA-Z0-9_-]{11})"
)

STREAM_URL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^https?://(?:(?:www|m|music)\.)?"
    r"(?:youtube\.com/(?:watch\?(?:[^#\s]*&)?v=|shorts/|embed/)|youtu\.be/)"
    r"[a-zA-Z0-9_-]{11}(?:[?&#/]\S*)?$"
)


def extract_video_id(url: str) -> str | None:
    match = YOUTUBE_ID_PATTERN.search(url)
    return match.group(1) if match else None


class YtDlpResolver(SearchService, StreamingService):
    """Keyword search and audio stream extraction through yt-dlp.

    yt-dlp is blocking, so every call runs in a worker thread. Extraction
    results are cached per URL for ``CACHE_TTL`` seconds; stream URLs expire
    upstream after a few hours.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)
        self._info_cache: dict[str, CacheEntry] = {}

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _get_search_opts(self) -> YtDlpOpts:
        return self._get_opts(extract_flat=True, format=None)

    # ── StreamingService ───────────────────────────────────────────────

    def is_stream_url(self, text: str) -> bool:
        return STREAM_URL_PATTERN.match(text.strip()) is not None

    async def open_audio_stream(self, track: TrackReference) -> AudioStream:
        info = await asyncio.to_thread(self._extract_info_sync, track.url)
        stream_url = self._extract_stream_url(info) if info is not None else None
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, track.url[:LOG_URL_TRUNCATE])
            raise PlaybackError(cause=LookupError(ErrorMessages.NO_STREAM_URL_FOR_TRACK.format(url=track.url)))

        return AudioStream(track=track, stream_url=stream_url, title=info.title if info else None)

    def _extract_stream_url(self, info: YtDlpEntry) -> str | None:
        if info.url:
            return info.url
        return self._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        if not formats:
            return None
        audio_only = [f for f in formats if f.is_audio_only and f.url]
        if audio_only:
            return max(audio_only, key=lambda f: f.abr or 0.0).url
        with_audio = [f for f in formats if f.acodec != "none" and f.url]
        if with_audio:
            return with_audio[-1].url
        return None

    def _extract_info_sync(self, url: str) -> YtDlpEntry | None:
        now = time.time()
        cached = self._info_cache.get(url)
        if cached is not None:
            if now - cached.cached_at < CACHE_TTL:
                logger.debug(LogTemplates.CACHE_HIT_URL, url[:LOG_URL_TRUNCATE])
                return cached.info
            self._info_cache.pop(url, None)

        try:
            with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
                data = ydl.extract_info(url, download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url[:LOG_URL_TRUNCATE])
            return None

        result = YtDlpEntry.model_validate(dict(data)) if isinstance(data, dict) else None
        if result is not None:
            self._info_cache[url] = CacheEntry(info=result, cached_at=now)
            self._prune_cache(now)
        return result

    def _prune_cache(self, now: float) -> None:
        if len(self._info_cache) <= CACHE_MAX_SIZE:
            return

        expired = [k for k, entry in self._info_cache.items() if now - entry.cached_at >= CACHE_TTL]
        for k in expired:
            self._info_cache.pop(k, None)
        if expired:
            logger.debug(LogTemplates.CACHE_EXPIRED_CLEANED, len(expired))

        overflow = len(self._info_cache) - CACHE_MAX_SIZE
        if overflow > 0:
            oldest = sorted(self._info_cache, key=lambda k: self._info_cache[k].cached_at)[:overflow]
            for k in oldest:
                self._info_cache.pop(k, None)
            logger.debug(LogTemplates.CACHE_EVICTED_OLDEST, len(oldest))

    # ── SearchService ──────────────────────────────────────────────────

    async def search_by_keyword(self, text: str) -> str | None:
        return await asyncio.to_thread(self._search_sync, text)

    def _search_sync(self, query: str) -> str | None:
        try:
            with YoutubeDL(params=cast(Any, self._get_search_opts().model_dump())) as ydl:
                data = ydl.extract_info(f"ytsearch1:{query}", download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            return None

        if not isinstance(data, dict):
            return None
        entries = list(data.get("entries") or [])
        for raw in entries:
            if not raw:
                continue
            entry = YtDlpEntry.model_validate(dict(raw))
            video_id = entry.id or (extract_video_id(entry.url) if entry.url else None)
            if video_id:
                return video_id
        return None
