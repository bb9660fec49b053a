"""Command and handler for playing a track from a query or URL."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from discord_jukebox.application.services.playback_models import EnqueueStatus
from discord_jukebox.domain.music.value_objects import TrackReference
from discord_jukebox.domain.shared.exceptions import EmptyQueryError, NoVoiceChannelError
from discord_jukebox.domain.shared.messages import DiscordUIMessages
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ..interfaces.track_resolver import TrackResolver
    from ..services.playback_service import PlaybackApplicationService

logger = logging.getLogger(__name__)


class PlayTrackStatus(Enum):
    """Status codes for play track results."""

    NOW_PLAYING = "now_playing"
    QUEUED = "queued"
    DISCARDED = "discarded"


class PlayTrackCommand(BaseModel):
    """Request to resolve a query/URL and queue the track."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    text_channel_id: DiscordSnowflake
    voice_channel_id: DiscordSnowflake | None
    query: str

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class PlayTrackResult(BaseModel):
    """Result of a play track command.

    ``reply`` is what the requester should be told directly; it is None when
    the announcement is delivered by playback itself ("Now playing").
    """

    model_config = ConfigDict(frozen=True)

    status: PlayTrackStatus
    track: TrackReference
    queue_position: NonNegativeInt = 0
    queue_length: NonNegativeInt = 0

    @property
    def reply(self) -> str | None:
        if self.status == PlayTrackStatus.QUEUED:
            return DiscordUIMessages.ACTION_ADDED_TO_QUEUE
        if self.status == PlayTrackStatus.DISCARDED:
            return DiscordUIMessages.STATE_REQUEST_DISCARDED
        return None


_STATUS_BY_ENQUEUE = {
    EnqueueStatus.STARTED: PlayTrackStatus.NOW_PLAYING,
    EnqueueStatus.QUEUED: PlayTrackStatus.QUEUED,
    EnqueueStatus.DISCARDED: PlayTrackStatus.DISCARDED,
}


class PlayTrackHandler:
    """Resolves a query, then hands the track to playback.

    The session generation is captured before resolution; if the session is
    stopped while resolution is in flight, the track is discarded.
    """

    def __init__(
        self,
        *,
        track_resolver: TrackResolver,
        playback_service: PlaybackApplicationService,
    ) -> None:
        self._resolver = track_resolver
        self._playback = playback_service

    async def handle(self, command: PlayTrackCommand) -> PlayTrackResult:
        if not command.query:
            raise EmptyQueryError()
        if command.voice_channel_id is None:
            raise NoVoiceChannelError()

        generation = await self._playback.current_generation(command.guild_id)
        track = await self._resolver.resolve(command.query)

        result = await self._playback.enqueue(
            command.guild_id,
            track,
            voice_channel_id=command.voice_channel_id,
            text_channel_id=command.text_channel_id,
            expected_generation=generation,
        )
        return PlayTrackResult(
            status=_STATUS_BY_ENQUEUE[result.status],
            track=result.track,
            queue_position=result.position,
            queue_length=result.queue_length,
        )
