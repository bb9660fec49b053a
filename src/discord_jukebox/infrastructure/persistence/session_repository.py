"""In-memory implementation of the session repository."""

from __future__ import annotations

import logging

from discord_jukebox.domain.music.entities import PlaybackSession
from discord_jukebox.domain.music.repository import SessionRepository
from discord_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class InMemorySessionRepository(SessionRepository):
    """Process-local registry keyed by guild id.

    Sessions hold live voice handles, so they are never serialised. Idle
    sessions are kept so their generation counter outlives a stop.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, PlaybackSession] = {}

    async def get(self, guild_id: int) -> PlaybackSession | None:
        return self._sessions.get(guild_id)

    async def get_or_create(self, guild_id: int) -> PlaybackSession:
        session = self._sessions.get(guild_id)
        if session is None:
            session = PlaybackSession(guild_id=guild_id)
            self._sessions[guild_id] = session
            logger.debug(LogTemplates.SESSION_CREATED, guild_id)
        return session

    async def delete(self, guild_id: int) -> bool:
        return self._sessions.pop(guild_id, None) is not None

    async def all(self) -> list[PlaybackSession]:
        return list(self._sessions.values())
