"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from discord_jukebox.domain.shared.messages import ErrorMessages

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


@dataclass(frozen=True)
class TrackReference:
    """Opaque locator for a playable audio source."""

    url: str

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_URL)
        if not self.url.startswith(("http://", "https://")):
            raise ValueError(ErrorMessages.INVALID_TRACK_URL.format(url=self.url))

    def __str__(self) -> str:
        return self.url

    @classmethod
    def from_video_id(cls, video_id: str) -> TrackReference:
        """Build the canonical watch URL for a search result."""
        if not video_id or not video_id.strip():
            raise ValueError(ErrorMessages.EMPTY_VIDEO_ID)
        return cls(YOUTUBE_WATCH_URL.format(video_id=video_id.strip()))


@dataclass(frozen=True)
class TrackMetadata:
    """Artist and title reported by the metadata service."""

    artist_name: str
    track_title: str

    @property
    def search_text(self) -> str:
        return f"{self.artist_name} - {self.track_title}"


@dataclass(frozen=True)
class AudioStream:
    """An opened, audio-only stream ready to be fed to a player."""

    track: TrackReference
    stream_url: str
    title: str | None = None

    def __post_init__(self) -> None:
        if not self.stream_url:
            raise ValueError(ErrorMessages.EMPTY_STREAM_URL)


class PlaybackState(Enum):
    """Playback state with enforced transitions.

    State transitions:
    - IDLE -> PLAYING (voice bound, head loading or rendering)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> PLAYING (resume)
    - PLAYING/PAUSED -> IDLE (queue drained, stop, or playback error)
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"

    def can_transition_to(self, target: PlaybackState) -> bool:
        valid_transitions = {
            PlaybackState.IDLE: {PlaybackState.PLAYING},
            PlaybackState.PLAYING: {PlaybackState.PAUSED, PlaybackState.IDLE},
            PlaybackState.PAUSED: {PlaybackState.PLAYING, PlaybackState.IDLE},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.PLAYING, PlaybackState.PAUSED}


class PlayerEventKind(Enum):
    """Signals a player reports back to its session."""

    IDLE = "idle"
    ERROR = "error"
