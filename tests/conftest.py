import asyncio
from collections.abc import Awaitable, Callable

import pytest

from discord_jukebox.application.interfaces.notifier import PlaybackNotifier
from discord_jukebox.application.interfaces.track_resolver import TrackResolver
from discord_jukebox.application.interfaces.voice_adapter import (
    AudioPlayer,
    PlayerListener,
    VoiceAdapter,
    VoiceConnection,
)
from discord_jukebox.application.services.playback_service import PlaybackApplicationService
from discord_jukebox.domain.music.value_objects import AudioStream, PlayerEventKind, TrackReference
from discord_jukebox.domain.shared.exceptions import PlaybackError
from discord_jukebox.infrastructure.persistence.session_repository import InMemorySessionRepository

GUILD_ID = 111111111111111111
TEXT_CHANNEL_ID = 222222222222222222
VOICE_CHANNEL_ID = 333333333333333333

TRACK_A = TrackReference("https://www.youtube.com/watch?v=aaaaaaaaaaa")
TRACK_B = TrackReference("https://www.youtube.com/watch?v=bbbbbbbbbbb")
TRACK_C = TrackReference("https://www.youtube.com/watch?v=ccccccccccc")


# ============================================================================
# Voice fakes
# ============================================================================


class FakeConnection(VoiceConnection):
    def __init__(self, channel_id: int) -> None:
        self._channel_id = channel_id
        self.destroy_calls = 0

    @property
    def channel_id(self) -> int:
        return self._channel_id

    @property
    def destroyed(self) -> bool:
        return self.destroy_calls > 0

    async def destroy(self) -> None:
        self.destroy_calls += 1


class FakePlayer(AudioPlayer):
    """Single-resource player driven by the test instead of an audio thread."""

    def __init__(self, listener: PlayerListener) -> None:
        self.listener = listener
        self.played: list[AudioStream] = []
        self.state = "idle"

    @property
    def played_tracks(self) -> list[TrackReference]:
        return [stream.track for stream in self.played]

    def play(self, stream: AudioStream) -> None:
        self.played.append(stream)
        self.state = "playing"

    def pause(self) -> bool:
        if self.state != "playing":
            return False
        self.state = "paused"
        return True

    def unpause(self) -> bool:
        if self.state != "paused":
            return False
        self.state = "playing"
        return True

    def stop(self) -> bool:
        if self.state == "idle":
            return False
        self.state = "idle"
        self.listener(PlayerEventKind.IDLE, None)
        return True

    def finish(self) -> None:
        """Simulate the loaded resource reaching its end."""
        self.state = "idle"
        self.listener(PlayerEventKind.IDLE, None)

    def fail(self, error: BaseException) -> None:
        self.state = "idle"
        self.listener(PlayerEventKind.ERROR, error)


class FakeVoiceAdapter(VoiceAdapter):
    def __init__(self) -> None:
        self.joins: list[tuple[int, int]] = []
        self.connections: list[FakeConnection] = []
        self.players: list[FakePlayer] = []
        self.join_error: Exception | None = None
        self.join_gate: asyncio.Event | None = None

    @property
    def player(self) -> FakePlayer:
        return self.players[-1]

    @property
    def connection(self) -> FakeConnection:
        return self.connections[-1]

    async def join(self, guild_id: int, channel_id: int) -> FakeConnection:
        self.joins.append((guild_id, channel_id))
        if self.join_gate is not None:
            await self.join_gate.wait()
        if self.join_error is not None:
            raise self.join_error
        connection = FakeConnection(channel_id)
        self.connections.append(connection)
        return connection

    def create_player(self, connection: VoiceConnection, listener: PlayerListener) -> FakePlayer:
        player = FakePlayer(listener)
        self.players.append(player)
        return player


# ============================================================================
# Resolution / notification fakes
# ============================================================================


class FakeResolver(TrackResolver):
    """URLs resolve to themselves; text resolves to a deterministic watch URL."""

    def __init__(self) -> None:
        self.resolved: list[str] = []
        self.opened: list[TrackReference] = []
        self.failing_streams: set[str] = set()
        self.stream_gates: dict[str, asyncio.Event] = {}
        self.before_resolve: Callable[[str], Awaitable[None]] | None = None

    async def resolve(self, query: str) -> TrackReference:
        self.resolved.append(query)
        if self.before_resolve is not None:
            await self.before_resolve(query)
        if query.startswith(("http://", "https://")):
            return TrackReference(query)
        return TrackReference.from_video_id(query.replace(" ", "-"))

    async def open_audio_stream(self, track: TrackReference) -> AudioStream:
        self.opened.append(track)
        gate = self.stream_gates.get(track.url)
        if gate is not None:
            await gate.wait()
        if track.url in self.failing_streams:
            raise PlaybackError(cause=LookupError(track.url))
        return AudioStream(track=track, stream_url=f"{track.url}&stream=1", title=track.url[-11:])


class RecordingNotifier(PlaybackNotifier):
    def __init__(self) -> None:
        self.messages: list[tuple[int, str]] = []

    @property
    def contents(self) -> list[str]:
        return [content for _, content in self.messages]

    async def notify(self, channel_id: int, content: str) -> None:
        self.messages.append((channel_id, content))


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def session_repository():
    return InMemorySessionRepository()


@pytest.fixture
def voice_adapter():
    return FakeVoiceAdapter()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def playback_service(session_repository, voice_adapter, resolver, notifier):
    return PlaybackApplicationService(
        session_repository=session_repository,
        voice_adapter=voice_adapter,
        track_resolver=resolver,
        notifier=notifier,
    )


@pytest.fixture
def enqueue(playback_service):
    """Enqueue as a member of VOICE_CHANNEL_ID typing in TEXT_CHANNEL_ID."""

    async def _enqueue(track: TrackReference, **kwargs):
        return await playback_service.enqueue(
            GUILD_ID,
            track,
            voice_channel_id=VOICE_CHANNEL_ID,
            text_channel_id=TEXT_CHANNEL_ID,
            **kwargs,
        )

    return _enqueue
