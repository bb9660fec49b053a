"""
Music Domain Repository Interfaces

Abstract base classes defining the contracts for session storage.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from discord_jukebox.domain.music.entities import PlaybackSession


class SessionRepository(ABC):
    """Abstract registry of playback sessions, one per guild.

    Each command handler looks its session up here by guild id instead of
    sharing a process-wide session.
    """

    @abstractmethod
    async def get(self, guild_id: int) -> PlaybackSession | None:
        """Retrieve a session by guild ID.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The session if found, None otherwise.
        """
        ...

    @abstractmethod
    async def get_or_create(self, guild_id: int) -> PlaybackSession:
        """Get an existing session or create a new idle one.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The existing or newly created session.
        """
        ...

    @abstractmethod
    async def delete(self, guild_id: int) -> bool:
        """Delete a session by guild ID.

        Returns:
            True if the session was deleted, False if it didn't exist.
        """
        ...

    @abstractmethod
    async def all(self) -> list[PlaybackSession]:
        """Return every known session."""
        ...
