"""Port interfaces for turning user queries into playable tracks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.value_objects import AudioStream, TrackMetadata, TrackReference


class MetadataService(ABC):
    """Looks up artist and title for a shared music-service track."""

    @abstractmethod
    async def get_track_metadata(self, track_id: NonEmptyStr) -> "TrackMetadata":
        """Raises MetadataLookupFailedError when the track cannot be described."""
        ...


class SearchService(ABC):
    """Keyword search against the video platform."""

    @abstractmethod
    async def search_by_keyword(self, text: NonEmptyStr) -> str | None:
        """Return the video id of the top result, or None."""
        ...


class StreamingService(ABC):
    """Recognises and opens platform URLs."""

    @abstractmethod
    def is_stream_url(self, text: str) -> bool:
        """True when *text* is a URL the streaming service can open directly."""
        ...

    @abstractmethod
    async def open_audio_stream(self, track: "TrackReference") -> "AudioStream":
        """Raises PlaybackError when no audio stream can be opened."""
        ...


class TrackResolver(ABC):
    """Interface used by playback to resolve queries and open tracks."""

    @abstractmethod
    async def resolve(self, query: NonEmptyStr) -> "TrackReference":
        """Map a user query to a track reference.

        Raises:
            MetadataLookupFailedError: music-service link with no metadata.
            NoSearchResultsError: keyword search found nothing.
        """
        ...

    @abstractmethod
    async def open_audio_stream(self, track: "TrackReference") -> "AudioStream":
        ...
