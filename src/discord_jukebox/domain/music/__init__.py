"""
Music Bounded Context

Domain logic for the playback queue and per-guild session state.
"""

from discord_jukebox.domain.music.entities import PlaybackSession, ReleasedVoice
from discord_jukebox.domain.music.events import PlayerEvent
from discord_jukebox.domain.music.repository import SessionRepository
from discord_jukebox.domain.music.services import (
    extract_spotify_track_id,
    format_queue,
    is_spotify_track_link,
)
from discord_jukebox.domain.music.value_objects import (
    AudioStream,
    PlaybackState,
    PlayerEventKind,
    TrackMetadata,
    TrackReference,
)

__all__ = [
    # Entities
    "PlaybackSession",
    "ReleasedVoice",
    # Value Objects
    "TrackReference",
    "TrackMetadata",
    "AudioStream",
    "PlaybackState",
    "PlayerEventKind",
    # Events
    "PlayerEvent",
    # Repository
    "SessionRepository",
    # Services
    "format_queue",
    "extract_spotify_track_id",
    "is_spotify_track_link",
]
