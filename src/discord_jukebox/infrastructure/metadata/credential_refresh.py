"""Periodic refresh of the Spotify client-credentials token."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import SpotifySettings
    from .spotify_client import SpotifyMetadataService

logger = logging.getLogger(__name__)


class CredentialRefreshJob:
    """Refreshes immediately on start, then every ``token_refresh_seconds``."""

    def __init__(
        self,
        *,
        metadata_service: SpotifyMetadataService,
        settings: SpotifySettings,
    ) -> None:
        self._metadata = metadata_service
        self._settings = settings
        self._running = False
        self._task: asyncio.Task | None = None
        self.refresh_count = 0

    def start(self) -> None:
        if self._running:
            logger.warning(LogTemplates.CREDENTIAL_REFRESH_ALREADY_RUNNING)
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(LogTemplates.CREDENTIAL_REFRESH_STARTED, self._settings.token_refresh_seconds)

    async def stop(self) -> None:
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info(LogTemplates.CREDENTIAL_REFRESH_STOPPED)

    async def _run_loop(self) -> None:
        while self._running:
            await self.run_refresh()

            try:
                await asyncio.sleep(self._settings.token_refresh_seconds)
            except asyncio.CancelledError:
                break

    async def run_refresh(self) -> bool:
        self.refresh_count += 1
        try:
            return await self._metadata.refresh_credentials()
        except Exception:
            logger.exception(LogTemplates.CREDENTIAL_REFRESH_ERROR)
            return False

    @property
    def is_running(self) -> bool:
        return self._running
