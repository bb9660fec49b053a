"""Playback Application Service - drives per-guild sessions through their state machine."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

from ...domain.music.entities import PlaybackSession, ReleasedVoice
from ...domain.music.events import PlayerEvent
from ...domain.music.value_objects import PlayerEventKind, TrackReference
from ...domain.shared.exceptions import (
    NothingPlayingError,
    NoVoiceChannelError,
    PlaybackError,
    VoiceConnectionError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake
from .playback_models import EnqueueResult, EnqueueStatus, StopResult

if TYPE_CHECKING:
    from ...domain.music.repository import SessionRepository
    from ..interfaces.notifier import PlaybackNotifier
    from ..interfaces.track_resolver import TrackResolver
    from ..interfaces.voice_adapter import PlayerListener, VoiceAdapter

logger = logging.getLogger(__name__)


class PlaybackApplicationService:
    """Orchestrates sessions, the voice adapter, and stream opening.

    Player events never mutate a session directly: listeners post them onto
    an ``asyncio.Queue`` and a single consumer applies them in order.
    """

    def __init__(
        self,
        *,
        session_repository: SessionRepository,
        voice_adapter: VoiceAdapter,
        track_resolver: TrackResolver,
        notifier: PlaybackNotifier,
    ) -> None:
        self._session_repo = session_repository
        self._voice_adapter = voice_adapter
        self._resolver = track_resolver
        self._notifier = notifier

        self._events: asyncio.Queue[PlayerEvent] = asyncio.Queue()
        self._consumer: asyncio.Task[None] | None = None
        self._head_tasks: set[asyncio.Task[None]] = set()

    # ─── Event consumer ────────────────────────────────────────────────

    def start(self) -> None:
        if self._consumer is not None and not self._consumer.done():
            logger.warning(LogTemplates.EVENT_CONSUMER_ALREADY_RUNNING)
            return

        self._consumer = asyncio.create_task(self._consume_loop())
        logger.info(LogTemplates.EVENT_CONSUMER_STARTED)

    async def stop_consumer(self) -> None:
        if self._consumer is None:
            return

        self._consumer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._consumer
        self._consumer = None
        logger.info(LogTemplates.EVENT_CONSUMER_STOPPED)

    @property
    def is_consuming(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    def post_event(self, event: PlayerEvent) -> None:
        """Queue a player event. Must be called on the event loop thread."""
        self._events.put_nowait(event)

    async def process_pending_events(self) -> int:
        """Apply every queued event and wait for the playback it starts.

        Returns the number of events applied.
        """
        processed = 0
        while True:
            while not self._events.empty():
                await self.handle_event(self._events.get_nowait())
                processed += 1
            if not self._head_tasks:
                return processed
            await asyncio.gather(*list(self._head_tasks), return_exceptions=True)

    async def _consume_loop(self) -> None:
        while True:
            event = await self._events.get()
            try:
                await self.handle_event(event)
            except Exception:
                logger.exception(LogTemplates.EVENT_HANDLER_ERROR, event.kind.value, event.guild_id)

    async def handle_event(self, event: PlayerEvent) -> None:
        logger.debug(LogTemplates.EVENT_RECEIVED, event.kind.value, event.guild_id, event.binding_id)

        session = await self._session_repo.get(event.guild_id)
        if session is None or not session.is_active or session.binding_id != event.binding_id:
            logger.debug(
                LogTemplates.EVENT_STALE,
                event.kind.value,
                event.guild_id,
                event.binding_id,
                session.binding_id if session is not None else None,
            )
            return

        if event.kind == PlayerEventKind.ERROR:
            await self._fail_session(session, PlaybackError(cause=RuntimeError(event.error)))
            return

        await self._advance(session)

    async def _advance(self, session: PlaybackSession) -> None:
        next_track = session.advance()
        logger.debug(LogTemplates.QUEUE_ADVANCED, session.guild_id, session.queue_length)
        if next_track is None:
            await self._release(session.guild_id, session.tear_down(cancel_pending=False))
            logger.info(LogTemplates.PLAYBACK_FINISHED, session.guild_id)
            await self._announce(session, DiscordUIMessages.ACTION_FINISHED)
            return

        # Opening a stream can take seconds; later events (e.g. a skip of the
        # loading track) must not wait behind it.
        self._spawn(session.guild_id, self._play_head(session))

    def _spawn(self, guild_id: DiscordSnowflake, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(self._guarded(guild_id, coro))
        self._head_tasks.add(task)
        task.add_done_callback(self._head_tasks.discard)

    async def _guarded(self, guild_id: DiscordSnowflake, coro: Coroutine[Any, Any, None]) -> None:
        try:
            await coro
        except Exception:
            logger.exception(LogTemplates.EVENT_HANDLER_ERROR, PlayerEventKind.IDLE.value, guild_id)

    def _make_listener(self, guild_id: DiscordSnowflake, binding_id: int) -> PlayerListener:
        def listener(kind: PlayerEventKind, error: BaseException | None) -> None:
            if kind == PlayerEventKind.ERROR:
                self.post_event(PlayerEvent.failed(guild_id, binding_id, error or "unknown"))
            else:
                self.post_event(PlayerEvent.idle(guild_id, binding_id))

        return listener

    # ─── Commands ──────────────────────────────────────────────────────

    async def current_generation(self, guild_id: DiscordSnowflake) -> int:
        session = await self._session_repo.get_or_create(guild_id)
        return session.generation

    async def enqueue(
        self,
        guild_id: DiscordSnowflake,
        track: TrackReference,
        *,
        voice_channel_id: DiscordSnowflake | None,
        text_channel_id: DiscordSnowflake,
        expected_generation: int | None = None,
    ) -> EnqueueResult:
        """Append *track*, connecting and starting playback if the session is idle.

        Raises:
            NoVoiceChannelError: the requester is not in a voice channel.
            VoiceConnectionError: joining the voice channel failed.
        """
        if voice_channel_id is None:
            raise NoVoiceChannelError()

        session = await self._session_repo.get_or_create(guild_id)
        if expected_generation is not None and session.generation != expected_generation:
            logger.info(
                LogTemplates.QUEUE_STALE_REQUEST,
                track,
                guild_id,
                expected_generation,
                session.generation,
            )
            return EnqueueResult(
                status=EnqueueStatus.DISCARDED,
                track=track,
                queue_length=session.queue_length,
            )

        position = session.enqueue(track)
        logger.info(LogTemplates.QUEUE_ENQUEUED, track, position, guild_id)
        if position > 0:
            return EnqueueResult(
                status=EnqueueStatus.QUEUED,
                track=track,
                position=position,
                queue_length=session.queue_length,
            )

        session.text_channel_id = text_channel_id
        await self._connect(session, voice_channel_id)
        await self._play_head(session)
        return EnqueueResult(
            status=EnqueueStatus.STARTED,
            track=track,
            position=0,
            queue_length=session.queue_length,
        )

    async def _connect(self, session: PlaybackSession, voice_channel_id: DiscordSnowflake) -> None:
        try:
            connection = await self._voice_adapter.join(session.guild_id, voice_channel_id)
        except VoiceConnectionError:
            released = session.tear_down(cancel_pending=False)
            # Tracks queued by others during the join were already acknowledged.
            if released.tracks_cleared > 1:
                logger.warning(
                    LogTemplates.QUEUE_DROPPED_ON_JOIN_FAILURE, released.tracks_cleared, session.guild_id
                )
                await self._announce(session, DiscordUIMessages.ERROR_QUEUE_DROPPED_NO_VOICE)
            raise

        if session.is_active:
            logger.warning(LogTemplates.VOICE_JOIN_SUPERSEDED, session.guild_id)
            await self._release(session.guild_id, ReleasedVoice(connection, None, 0))
            return

        # No await between here and bind_voice, so the next id is stable.
        listener = self._make_listener(session.guild_id, session.binding_id + 1)
        player = self._voice_adapter.create_player(connection, listener)
        session.bind_voice(connection, player)

    async def _play_head(self, session: PlaybackSession) -> None:
        track = session.head
        if track is None or not session.is_active:
            return

        binding_id, head_serial = session.binding_id, session.head_serial
        try:
            stream = await self._resolver.open_audio_stream(track)
        except PlaybackError as exc:
            if session.binding_id == binding_id and session.head_serial == head_serial:
                await self._fail_session(session, exc)
            return

        if session.binding_id != binding_id or session.head_serial != head_serial:
            logger.info(LogTemplates.PLAYBACK_STREAM_SUPERSEDED, track, session.guild_id)
            return

        try:
            session.player.play(stream)
        except PlaybackError as exc:
            await self._fail_session(session, exc)
            return

        logger.info(LogTemplates.PLAYBACK_STARTED, stream.title or track, session.guild_id)
        await self._announce(session, DiscordUIMessages.ACTION_NOW_PLAYING)

    async def skip(self, guild_id: DiscordSnowflake) -> None:
        session = await self._require_active(guild_id, "skip")
        # A player with nothing loaded (stream still opening) reports no
        # IDLE of its own. Advancing here moves head_serial before that
        # opening can land, so it is discarded instead of played.
        if not session.player.stop():
            logger.info(LogTemplates.PLAYBACK_SKIPPED_LOADING, session.head, guild_id)
            await self._advance(session)

    async def pause(self, guild_id: DiscordSnowflake) -> None:
        session = await self._session_repo.get(guild_id)
        if session is None or not session.is_playing or not session.player.pause():
            raise NothingPlayingError(operation="pause")

        session.pause()
        logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)

    async def resume(self, guild_id: DiscordSnowflake) -> None:
        session = await self._session_repo.get(guild_id)
        if session is None or not session.is_paused:
            raise NothingPlayingError(operation="resume")

        session.player.unpause()
        session.resume()
        logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)

    async def stop(self, guild_id: DiscordSnowflake) -> StopResult:
        session = await self._require_active(guild_id, "stop")
        released = session.tear_down(cancel_pending=True)
        await self._release(guild_id, released)

        logger.info(LogTemplates.QUEUE_CLEARED, released.tracks_cleared, guild_id)
        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return StopResult(guild_id=guild_id, tracks_cleared=released.tracks_cleared)

    async def peek_queue(self, guild_id: DiscordSnowflake) -> tuple[TrackReference, ...]:
        session = await self._session_repo.get(guild_id)
        return session.snapshot() if session is not None else ()

    async def shutdown(self) -> None:
        """Tear down every active session and stop consuming events."""
        await self.stop_consumer()
        for session in await self._session_repo.all():
            if session.is_active:
                await self._release(session.guild_id, session.tear_down(cancel_pending=True))

        for task in list(self._head_tasks):
            task.cancel()

    # ─── Helpers ───────────────────────────────────────────────────────

    async def _require_active(self, guild_id: DiscordSnowflake, operation: str) -> PlaybackSession:
        session = await self._session_repo.get(guild_id)
        if session is None or not session.is_active:
            raise NothingPlayingError(operation=operation)
        return session

    async def _fail_session(self, session: PlaybackSession, error: PlaybackError) -> None:
        logger.error(LogTemplates.PLAYBACK_ERROR, session.guild_id, error.cause or error)
        await self._release(session.guild_id, session.tear_down(cancel_pending=True))
        await self._announce(session, DiscordUIMessages.ERROR_PLAYBACK_FAILED)

    async def _release(self, guild_id: DiscordSnowflake, released: ReleasedVoice) -> None:
        """Stop the detached player and leave voice. Late player events are stale by now."""
        try:
            if released.player is not None:
                released.player.stop()
            if released.connection is not None:
                await released.connection.destroy()
                logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
        except Exception:
            logger.exception(LogTemplates.VOICE_CLEANUP_ERROR, guild_id)

    async def _announce(self, session: PlaybackSession, content: str) -> None:
        if session.text_channel_id is None:
            return
        await self._notifier.notify(session.text_channel_id, content)
