from __future__ import annotations

import io
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from discord_dj_bot.application.interfaces.notifier import Notifier
from discord_dj_bot.application.interfaces.stream_provider import AudioStream, StreamProvider
from discord_dj_bot.application.interfaces.voice_adapter import (
    AudioPlayer,
    PlayerListener,
    VoiceConnection,
    VoiceGateway,
)
from discord_dj_bot.domain.music.entities import Song
from discord_dj_bot.domain.music.value_objects import PlayerEvent, PlayerEventKind
from discord_dj_bot.domain.shared.exceptions import StreamAcquisitionError, VoiceConnectionError

GUILD_ID = 111111111111
MEMBER_ID = 222222222222
CHANNEL_ID = 333333333333

# ============================================================================
# Fake voice / stream ports
# ============================================================================


class FakeStream(AudioStream):
    def __init__(self, source_reference: str) -> None:
        self.source_reference = source_reference
        self._closed = False
        self._stdout = io.BytesIO(b"")

    @property
    def stdout(self):
        return self._stdout

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True


class FakeStreamProvider(StreamProvider):
    """Records opened streams; references in ``failing`` raise on open."""

    def __init__(self) -> None:
        self.opened: list[FakeStream] = []
        self.failing: set[str] = set()

    async def open(self, source_reference: str) -> FakeStream:
        if source_reference in self.failing:
            raise StreamAcquisitionError(source_reference, cause=OSError("boom"))
        stream = FakeStream(source_reference)
        self.opened.append(stream)
        return stream


class FakePlayer(AudioPlayer):
    """Audio player that records plays and lets tests emit events.

    ``stop()`` behaves like discord.py: the current resource ends and a
    FINISHED event carrying its token is delivered.
    """

    def __init__(self) -> None:
        self.listener: PlayerListener | None = None
        self.plays: list[tuple[FakeStream, int]] = []
        self.playing_token: int | None = None
        self.paused = False
        self.stop_calls = 0
        self.fail_next_play = False
        self.play_error: Exception | None = None
        self.refuse_pause_resume = False

    def set_listener(self, listener: PlayerListener) -> None:
        self.listener = listener

    def play(self, stream, token: int) -> None:
        if self.fail_next_play:
            self.fail_next_play = False
            stream.close()
            raise StreamAcquisitionError(stream.source_reference)
        if self.play_error is not None:
            error, self.play_error = self.play_error, None
            raise error
        self.plays.append((stream, token))
        self.playing_token = token
        self.paused = False

    def stop(self) -> None:
        self.stop_calls += 1
        if self.playing_token is not None:
            token, self.playing_token = self.playing_token, None
            self.paused = False
            self.emit(PlayerEventKind.FINISHED, token=token)

    def pause(self) -> bool:
        if self.refuse_pause_resume:
            return False
        self.paused = True
        return True

    def resume(self) -> bool:
        if self.refuse_pause_resume:
            return False
        self.paused = False
        return True

    @property
    def played_references(self) -> list[str]:
        return [stream.source_reference for stream, _ in self.plays]

    def emit(
        self,
        kind: PlayerEventKind,
        *,
        token: int | None = None,
        error: BaseException | None = None,
    ) -> None:
        if token is None:
            token = self.plays[-1][1]
        if kind.is_terminal and token == self.playing_token:
            self.playing_token = None
        assert self.listener is not None
        self.listener(PlayerEvent(kind, token, error))


class FakeConnection(VoiceConnection):
    def __init__(self, guild_id: int, channel_id: int) -> None:
        self.guild_id = guild_id
        self._channel_id = channel_id
        self.connected = True
        self.destroyed = False
        self.reconnect_error: VoiceConnectionError | None = None
        self.reconnect_calls = 0
        self.moves: list[int] = []
        self.player = FakePlayer()
        self.player_volume: float | None = None

    @property
    def channel_id(self) -> int | None:
        return self._channel_id

    def is_connected(self) -> bool:
        return self.connected

    async def move_to(self, channel_id: int) -> None:
        self.moves.append(channel_id)
        self._channel_id = channel_id

    async def reconnect(self) -> None:
        self.reconnect_calls += 1
        # Tearing down the old voice client ends its current source.
        self.player.stop()
        if self.reconnect_error is not None:
            self.connected = False
            raise self.reconnect_error
        self.connected = True

    async def destroy(self) -> None:
        self.destroyed = True
        self.connected = False

    def create_player(self, volume: float) -> FakePlayer:
        self.player_volume = volume
        return self.player


class FakeVoiceGateway(VoiceGateway):
    """Members are "in voice" when listed in ``member_channels``."""

    def __init__(self) -> None:
        self.member_channels: dict[tuple[int, int], int] = {}
        self.connections: list[FakeConnection] = []
        self.connect_error: VoiceConnectionError | None = None

    def put_member(self, guild_id: int, member_id: int, channel_id: int | None) -> None:
        if channel_id is None:
            self.member_channels.pop((guild_id, member_id), None)
        else:
            self.member_channels[(guild_id, member_id)] = channel_id

    def member_channel_id(self, guild_id: int, member_id: int) -> int | None:
        return self.member_channels.get((guild_id, member_id))

    async def connect(self, guild_id: int, channel_id: int) -> FakeConnection:
        if self.connect_error is not None:
            raise self.connect_error
        connection = FakeConnection(guild_id, channel_id)
        self.connections.append(connection)
        return connection

    @property
    def last_connection(self) -> FakeConnection:
        return self.connections[-1]


# ============================================================================
# Engine fixtures
# ============================================================================


@pytest.fixture
def make_song():
    """Factory for queued songs with sensible defaults."""

    def _make(
        title: str = "Test Song",
        source_reference: str | None = None,
        duration_seconds: int = 180,
        requester_id: int = MEMBER_ID,
        requester_name: str = "Tester",
    ) -> Song:
        return Song(
            title=title,
            source_reference=source_reference
            or f"https://www.youtube.com/watch?v={title.replace(' ', '_')}",
            duration_seconds=duration_seconds,
            requester_id=requester_id,
            requester_name=requester_name,
        )

    return _make


@pytest.fixture
def voice_gateway():
    gateway = FakeVoiceGateway()
    gateway.put_member(GUILD_ID, MEMBER_ID, CHANNEL_ID)
    return gateway


@pytest.fixture
def stream_provider():
    return FakeStreamProvider()


@pytest.fixture
def notifier():
    return AsyncMock(spec=Notifier)


@pytest.fixture
def queue_store():
    from discord_dj_bot.infrastructure.memory.queue_store import InMemoryGuildQueueStore

    return InMemoryGuildQueueStore(default_volume=0.5)


@pytest_asyncio.fixture
async def engine(queue_store, voice_gateway, stream_provider, notifier):
    """Playback engine wired to in-memory fakes."""
    from discord_dj_bot.application.services.playback_service import PlaybackEngine

    engine = PlaybackEngine(
        queue_store=queue_store,
        voice_gateway=voice_gateway,
        stream_provider=stream_provider,
        notifier=notifier,
    )
    yield engine
    await engine.close()
