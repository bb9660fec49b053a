"""Query for retrieving the current queue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.music.services import format_queue
from discord_jukebox.domain.music.value_objects import TrackReference
from discord_jukebox.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..services.playback_service import PlaybackApplicationService


class GetQueueQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class QueueInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    tracks: tuple[TrackReference, ...] = Field(default_factory=tuple)

    @property
    def length(self) -> int:
        return len(self.tracks)

    @property
    def is_empty(self) -> bool:
        return len(self.tracks) == 0

    @property
    def current_track(self) -> TrackReference | None:
        return self.tracks[0] if self.tracks else None

    def render(self) -> str:
        return format_queue(self.tracks)


class GetQueueHandler:

    def __init__(self, *, playback_service: PlaybackApplicationService) -> None:
        self._playback = playback_service

    async def handle(self, query: GetQueueQuery) -> QueueInfo:
        tracks = await self._playback.peek_queue(query.guild_id)
        return QueueInfo(guild_id=query.guild_id, tracks=tracks)
