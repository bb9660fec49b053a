"""DTOs for the playback application service."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from ...domain.music.value_objects import TrackReference
from ...domain.shared.types import NonNegativeInt


class EnqueueStatus(Enum):
    STARTED = "started"
    QUEUED = "queued"
    DISCARDED = "discarded"


class EnqueueResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: EnqueueStatus
    track: TrackReference
    position: NonNegativeInt = 0
    queue_length: NonNegativeInt = 0

    @property
    def started(self) -> bool:
        return self.status == EnqueueStatus.STARTED


class StopResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: int
    tracks_cleared: NonNegativeInt = 0
