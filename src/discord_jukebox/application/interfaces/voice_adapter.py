"""Port interfaces for the voice transport."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.value_objects import AudioStream, PlayerEventKind

PlayerListener = Callable[["PlayerEventKind", "BaseException | None"], None]
"""Receives player events. May be invoked from a non-event-loop thread."""


class VoiceConnection(ABC):
    """A live voice session in one guild."""

    @property
    @abstractmethod
    def channel_id(self) -> DiscordSnowflake:
        ...

    @abstractmethod
    async def destroy(self) -> None:
        """Leave the channel and release the session. Safe to call twice."""
        ...


class AudioPlayer(ABC):
    """Renders one stream at a time into a :class:`VoiceConnection`."""

    @abstractmethod
    def play(self, stream: "AudioStream") -> None:
        """Start rendering *stream*, replacing anything already loaded."""
        ...

    @abstractmethod
    def pause(self) -> bool:
        """Pause rendering. Returns False if nothing was playing."""
        ...

    @abstractmethod
    def unpause(self) -> bool:
        """Resume rendering. Returns False if nothing was paused."""
        ...

    @abstractmethod
    def stop(self) -> bool:
        """Stop rendering. Returns True if a resource was loaded.

        When True, an IDLE event for the stopped resource follows through
        the listener.
        """
        ...


class VoiceAdapter(ABC):
    """Interface for joining voice channels and creating players."""

    @abstractmethod
    async def join(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> VoiceConnection:
        """Join a voice channel.

        Raises:
            VoiceConnectionError: if the join is refused or times out.
        """
        ...

    @abstractmethod
    def create_player(self, connection: VoiceConnection, listener: PlayerListener) -> AudioPlayer:
        """Create a player subscribed to *connection*, reporting to *listener*."""
        ...
