"""Core domain entities for the music bounded context."""

from __future__ import annotations

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.music.value_objects import PlaybackState, TrackReference
from discord_jukebox.domain.shared.exceptions import InvalidOperationError
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeInt


class ReleasedVoice(NamedTuple):
    """Voice resources detached from a session, to be released by the caller."""

    connection: Any
    player: Any
    tracks_cleared: int


class PlaybackSession(BaseModel):
    """Aggregate root holding the queue and voice binding for one guild.

    ``connection`` and ``player`` are bound and released together. Position 0
    of ``queue`` is the track loaded into the player, or about to be.

    Counters:
    - ``generation`` moves on stop and on playback failure; in-flight play
      requests compare it to decide whether their result is stale.
    - ``binding_id`` moves each time a connection/player pair is bound;
      player events carry it so events from a released player are ignored.
    - ``head_serial`` moves whenever the head changes or the queue is
      dropped; stream openings compare it before handing audio to the player.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=False)

    guild_id: DiscordSnowflake
    queue: list[TrackReference] = Field(default_factory=list)
    state: PlaybackState = PlaybackState.IDLE
    text_channel_id: DiscordSnowflake | None = None

    connection: Any = None
    player: Any = None

    generation: NonNegativeInt = 0
    binding_id: NonNegativeInt = 0
    head_serial: NonNegativeInt = 0

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    @property
    def head(self) -> TrackReference | None:
        return self.queue[0] if self.queue else None

    @property
    def is_active(self) -> bool:
        return self.connection is not None and self.player is not None

    @property
    def is_playing(self) -> bool:
        return self.is_active and self.state == PlaybackState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.is_active and self.state == PlaybackState.PAUSED

    @property
    def is_idle(self) -> bool:
        return not self.is_active and not self.queue

    def snapshot(self) -> tuple[TrackReference, ...]:
        """Ordered, read-only copy of the queue."""
        return tuple(self.queue)

    def enqueue(self, track: TrackReference) -> int:
        """Append a track to the tail and return its zero-based position."""
        self.queue.append(track)
        return len(self.queue) - 1

    def bind_voice(self, connection: Any, player: Any) -> int:
        """Attach a fresh connection/player pair and return the new binding id."""
        if self.is_active:
            raise InvalidOperationError(
                operation="bind voice",
                current_state=self.state.value,
                message=f"Guild {self.guild_id} already has a voice binding",
            )
        if connection is None or player is None:
            raise InvalidOperationError(
                operation="bind voice",
                current_state=self.state.value,
                message="Connection and player must be bound together",
            )

        self.connection = connection
        self.player = player
        self.binding_id += 1
        self.state = PlaybackState.PLAYING
        return self.binding_id

    def advance(self) -> TrackReference | None:
        """Drop the finished head and return the new head, if any."""
        if not self.is_active:
            raise InvalidOperationError(operation="advance", current_state=self.state.value)

        if self.queue:
            self.queue.pop(0)
        self.head_serial += 1
        self.state = PlaybackState.PLAYING
        return self.head

    def transition_to(self, new_state: PlaybackState) -> None:
        if not self.is_active or not self.state.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self.state.value,
            )
        self.state = new_state

    def pause(self) -> None:
        self.transition_to(PlaybackState.PAUSED)

    def resume(self) -> None:
        self.transition_to(PlaybackState.PLAYING)

    def tear_down(self, *, cancel_pending: bool) -> ReleasedVoice:
        """Return to Idle, detaching voice resources for the caller to release.

        ``cancel_pending`` invalidates play requests whose resolution is
        still in flight.
        """
        released = ReleasedVoice(self.connection, self.player, len(self.queue))

        self.queue.clear()
        self.connection = None
        self.player = None
        self.state = PlaybackState.IDLE
        self.head_serial += 1
        if cancel_pending:
            self.generation += 1
        return released
