"""Track resolution service - maps user queries to playable track references."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.services import extract_spotify_track_id
from ...domain.music.value_objects import AudioStream, TrackReference
from ...domain.shared.exceptions import NoSearchResultsError
from ...domain.shared.messages import LogTemplates
from ..interfaces.track_resolver import TrackResolver

if TYPE_CHECKING:
    from ..interfaces.track_resolver import MetadataService, SearchService, StreamingService

logger = logging.getLogger(__name__)


class TrackResolutionService(TrackResolver):
    """Resolves queries in priority order.

    1. A directly playable stream URL is used unchanged.
    2. A Spotify track link is described by the metadata service and the
       resulting "artist - title" is searched. A failed lookup is reported,
       never retried as free text.
    3. Anything else is searched as free text.
    """

    def __init__(
        self,
        *,
        metadata_service: MetadataService,
        search_service: SearchService,
        streaming_service: StreamingService,
    ) -> None:
        self._metadata = metadata_service
        self._search = search_service
        self._streaming = streaming_service

    async def resolve(self, query: str) -> TrackReference:
        query = query.strip()
        if self._streaming.is_stream_url(query):
            logger.debug(LogTemplates.RESOLVE_DIRECT, query)
            return TrackReference(query)

        track_id = extract_spotify_track_id(query)
        if track_id is not None:
            logger.info(LogTemplates.RESOLVE_SPOTIFY, track_id)
            metadata = await self._metadata.get_track_metadata(track_id)
            return await self._search_for(metadata.search_text)

        return await self._search_for(query)

    async def _search_for(self, text: str) -> TrackReference:
        logger.info(LogTemplates.RESOLVE_SEARCH, text)
        video_id = await self._search.search_by_keyword(text)
        if not video_id:
            raise NoSearchResultsError(query=text)

        track = TrackReference.from_video_id(video_id)
        logger.info(LogTemplates.RESOLVE_RESULT, text, track)
        return track

    async def open_audio_stream(self, track: TrackReference) -> AudioStream:
        return await self._streaming.open_audio_stream(track)
