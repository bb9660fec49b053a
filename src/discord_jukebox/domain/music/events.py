"""Events reported by audio players to the playback service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from discord_jukebox.domain.music.value_objects import PlayerEventKind
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeInt


class PlayerEvent(BaseModel):
    """A player finished its resource (IDLE) or failed while rendering it (ERROR).

    ``binding_id`` identifies the connection/player pair that produced the
    event, so a late event from a released player can be recognised.
    """

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    binding_id: NonNegativeInt
    kind: PlayerEventKind
    error: str | None = None

    @classmethod
    def idle(cls, guild_id: int, binding_id: int) -> PlayerEvent:
        return cls(guild_id=guild_id, binding_id=binding_id, kind=PlayerEventKind.IDLE)

    @classmethod
    def failed(cls, guild_id: int, binding_id: int, error: BaseException | str) -> PlayerEvent:
        return cls(
            guild_id=guild_id,
            binding_id=binding_id,
            kind=PlayerEventKind.ERROR,
            error=repr(error) if isinstance(error, BaseException) else error,
        )
