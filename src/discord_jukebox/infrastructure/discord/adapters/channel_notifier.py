"""PlaybackNotifier implementation that posts to Discord text channels."""

from __future__ import annotations

import logging

import discord

from discord_jukebox.application.interfaces.notifier import PlaybackNotifier
from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.utils.reply import chunk_message

logger = logging.getLogger(__name__)


class DiscordChannelNotifier(PlaybackNotifier):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot

    async def _resolve_channel(self, channel_id: int) -> discord.abc.Messageable | None:
        channel = self._bot.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self._bot.fetch_channel(channel_id)
            except (discord.NotFound, discord.Forbidden):
                return None
        return channel if isinstance(channel, discord.abc.Messageable) else None

    async def notify(self, channel_id: int, content: str) -> None:
        channel = await self._resolve_channel(channel_id)
        if channel is None:
            logger.warning(LogTemplates.NOTIFY_CHANNEL_MISSING, channel_id)
            return

        try:
            for chunk in chunk_message(content):
                await channel.send(chunk)
        except discord.HTTPException as exc:
            logger.warning(LogTemplates.NOTIFY_SEND_FAILED, channel_id, exc)
