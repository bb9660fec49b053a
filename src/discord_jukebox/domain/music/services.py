"""Pure domain helpers for the music bounded context."""

from __future__ import annotations

import re
from collections.abc import Sequence

from discord_jukebox.domain.music.value_objects import TrackReference
from discord_jukebox.domain.shared.messages import DiscordUIMessages

SPOTIFY_TRACK_URL_PATTERN = re.compile(
    r"open\.spotify\.com/(?:intl-[a-z]{2}(?:-[a-z]{2})?/)?track/([A-Za-z0-9]+)",
    re.IGNORECASE,
)
SPOTIFY_TRACK_URI_PATTERN = re.compile(r"\bspotify:track:([A-Za-z0-9]+)")


def extract_spotify_track_id(query: str) -> str | None:
    """Return the track id when *query* contains a Spotify track link or URI."""
    for pattern in (SPOTIFY_TRACK_URL_PATTERN, SPOTIFY_TRACK_URI_PATTERN):
        match = pattern.search(query)
        if match:
            return match.group(1)
    return None


def is_spotify_track_link(query: str) -> bool:
    return extract_spotify_track_id(query) is not None


def format_queue(queue: Sequence[TrackReference]) -> str:
    """Render the queue as a 1-indexed listing, or the empty-queue message."""
    if not queue:
        return DiscordUIMessages.STATE_QUEUE_EMPTY

    lines = [
        DiscordUIMessages.QUEUE_LINE.format(position=index, track=track)
        for index, track in enumerate(queue, start=1)
    ]
    return "\n".join([DiscordUIMessages.QUEUE_HEADER, *lines])
