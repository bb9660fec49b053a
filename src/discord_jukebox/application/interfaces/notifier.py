"""Port interface for posting playback notices to a text channel."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_jukebox.domain.shared.types import DiscordSnowflake


class PlaybackNotifier(ABC):
    """Posts unsolicited messages, e.g. "Now playing" after an advance."""

    @abstractmethod
    async def notify(self, channel_id: DiscordSnowflake, content: str) -> None:
        """Send *content* to *channel_id*. Delivery failures are logged, not raised."""
        ...
