"""
Unit Tests for the Discord voice adapters

Tests for:
- StartSignallingSource reporting the first frame
- DiscordAudioPlayer play/stop/pause/resume and event marshalling
- DiscordVoiceConnection reconnect, move and destroy
- DiscordVoiceGateway connect and member lookup
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from discord_dj_bot.config.settings import AudioSettings
from discord_dj_bot.domain.music.value_objects import PlayerEventKind
from discord_dj_bot.domain.shared.exceptions import StreamAcquisitionError, VoiceConnectionError
from discord_dj_bot.infrastructure.discord.adapters.voice_adapter import (
    DiscordAudioPlayer,
    DiscordVoiceConnection,
    DiscordVoiceGateway,
    StartSignallingSource,
)

GUILD_ID = 111111111111
MEMBER_ID = 222222222222
CHANNEL_ID = 333333333333
OTHER_CHANNEL_ID = 444444444444


class _Frames(discord.AudioSource):
    def __init__(self, *frames: bytes) -> None:
        self._frames = list(frames)

    def read(self) -> bytes:
        return self._frames.pop(0) if self._frames else b""


class _Stream:
    source_reference = "https://www.youtube.com/watch?v=abc"

    def __init__(self) -> None:
        self.stdout = MagicMock()
        self.closed = False

    def close(self) -> None:
        self.closed = True


def _voice_channel(channel_id: int = CHANNEL_ID) -> MagicMock:
    channel = MagicMock(spec=discord.VoiceChannel)
    channel.id = channel_id
    return channel


def _voice_client(channel_id: int = CHANNEL_ID, connected: bool = True) -> MagicMock:
    client = MagicMock(spec=discord.VoiceClient)
    client.channel = _voice_channel(channel_id)
    client.is_connected.return_value = connected
    client.is_playing.return_value = False
    client.is_paused.return_value = False
    client.disconnect = AsyncMock()
    client.move_to = AsyncMock()
    return client


@pytest.fixture
def settings():
    return AudioSettings(cookies_file=None, connect_timeout_s=1.0)


# =============================================================================
# StartSignallingSource
# =============================================================================


class TestStartSignallingSource:
    def test_on_start_fires_once_on_first_frame(self):
        on_start = MagicMock()
        frame = b"\x00\x00" * 960
        source = StartSignallingSource(_Frames(frame, frame), volume=1.0, on_start=on_start)

        source.read()
        source.read()

        on_start.assert_called_once()

    def test_no_signal_without_audio(self):
        on_start = MagicMock()
        source = StartSignallingSource(_Frames(), volume=1.0, on_start=on_start)

        assert source.read() == b""
        on_start.assert_not_called()


# =============================================================================
# DiscordAudioPlayer
# =============================================================================


class TestDiscordAudioPlayer:
    @pytest.mark.asyncio
    async def test_play_hands_source_to_voice_client(self, settings):
        client = _voice_client()
        connection = DiscordVoiceConnection(GUILD_ID, client, settings)
        player = connection.create_player(0.5)
        stream = _Stream()

        with patch.object(DiscordAudioPlayer, "create_source", return_value="source") as create:
            player.play(stream, 7)

        create.assert_called_once_with(stream, 7)
        assert client.play.call_args.args[0] == "source"
        assert not stream.closed

    @pytest.mark.asyncio
    async def test_after_callback_emits_finished_on_loop(self, settings):
        client = _voice_client()
        player = DiscordVoiceConnection(GUILD_ID, client, settings).create_player(0.5)
        events = []
        player.set_listener(events.append)
        stream = _Stream()

        with patch.object(DiscordAudioPlayer, "create_source", return_value="source"):
            player.play(stream, 3)
        after = client.play.call_args.kwargs["after"]

        after(None)
        await asyncio.sleep(0)

        assert stream.closed
        assert [(e.kind, e.token) for e in events] == [(PlayerEventKind.FINISHED, 3)]

    @pytest.mark.asyncio
    async def test_after_callback_emits_error(self, settings):
        client = _voice_client()
        player = DiscordVoiceConnection(GUILD_ID, client, settings).create_player(0.5)
        events = []
        player.set_listener(events.append)

        with patch.object(DiscordAudioPlayer, "create_source", return_value="source"):
            player.play(_Stream(), 4)
        boom = RuntimeError("ffmpeg died")

        client.play.call_args.kwargs["after"](boom)
        await asyncio.sleep(0)

        assert events[0].kind is PlayerEventKind.ERROR
        assert events[0].error is boom

    @pytest.mark.asyncio
    async def test_play_stops_previous_source(self, settings):
        client = _voice_client()
        client.is_playing.return_value = True
        player = DiscordVoiceConnection(GUILD_ID, client, settings).create_player(0.5)

        with patch.object(DiscordAudioPlayer, "create_source", return_value="source"):
            player.play(_Stream(), 1)

        client.stop.assert_called_once()

    @pytest.mark.asyncio
    async def test_play_when_disconnected_raises_and_closes(self, settings):
        client = _voice_client(connected=False)
        player = DiscordVoiceConnection(GUILD_ID, client, settings).create_player(0.5)
        stream = _Stream()

        with pytest.raises(StreamAcquisitionError):
            player.play(stream, 1)

        assert stream.closed
        client.play.assert_not_called()

    @pytest.mark.asyncio
    async def test_client_exception_becomes_stream_error(self, settings):
        client = _voice_client()
        client.play.side_effect = discord.ClientException("Already playing audio.")
        player = DiscordVoiceConnection(GUILD_ID, client, settings).create_player(0.5)
        stream = _Stream()

        with patch.object(DiscordAudioPlayer, "create_source", return_value="source"):
            with pytest.raises(StreamAcquisitionError) as exc_info:
                player.play(stream, 1)

        assert isinstance(exc_info.value.cause, discord.ClientException)
        assert stream.closed

    @pytest.mark.asyncio
    async def test_opus_not_loaded_becomes_stream_error(self, settings):
        client = _voice_client()
        client.play.side_effect = discord.opus.OpusNotLoaded()
        player = DiscordVoiceConnection(GUILD_ID, client, settings).create_player(0.5)
        stream = _Stream()

        with patch.object(DiscordAudioPlayer, "create_source", return_value="source"):
            with pytest.raises(StreamAcquisitionError) as exc_info:
                player.play(stream, 1)

        assert isinstance(exc_info.value.cause, discord.opus.OpusNotLoaded)
        assert stream.closed

    @pytest.mark.asyncio
    async def test_pause_resume_follow_client_state(self, settings):
        client = _voice_client()
        player = DiscordVoiceConnection(GUILD_ID, client, settings).create_player(0.5)

        assert player.pause() is False
        client.is_playing.return_value = True
        assert player.pause() is True
        client.pause.assert_called_once()

        client.is_paused.return_value = True
        assert player.resume() is True
        client.resume.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_only_when_something_plays(self, settings):
        client = _voice_client()
        player = DiscordVoiceConnection(GUILD_ID, client, settings).create_player(0.5)

        player.stop()
        client.stop.assert_not_called()

        client.is_paused.return_value = True
        player.stop()
        client.stop.assert_called_once()


# =============================================================================
# DiscordVoiceConnection
# =============================================================================


class TestDiscordVoiceConnection:
    def test_tracks_channel(self, settings):
        connection = DiscordVoiceConnection(GUILD_ID, _voice_client(), settings)

        assert connection.channel_id == CHANNEL_ID
        assert connection.is_connected()

    @pytest.mark.asyncio
    async def test_destroy_disconnects(self, settings):
        client = _voice_client()
        connection = DiscordVoiceConnection(GUILD_ID, client, settings)

        await connection.destroy()

        client.disconnect.assert_awaited_once_with(force=True)
        assert connection.voice_client is None
        assert not connection.is_connected()

    @pytest.mark.asyncio
    async def test_reconnect_rejoins_same_channel(self, settings):
        client = _voice_client(connected=False)
        new_client = _voice_client()
        client.channel.connect = AsyncMock(return_value=new_client)
        connection = DiscordVoiceConnection(GUILD_ID, client, settings)

        await connection.reconnect()

        client.disconnect.assert_awaited_once_with(force=True)
        assert connection.voice_client is new_client

    @pytest.mark.asyncio
    async def test_reconnect_failure_raises(self, settings):
        client = _voice_client(connected=False)
        client.channel.connect = AsyncMock(side_effect=discord.ClientException("nope"))
        connection = DiscordVoiceConnection(GUILD_ID, client, settings)

        with pytest.raises(VoiceConnectionError):
            await connection.reconnect()

    @pytest.mark.asyncio
    async def test_reconnect_noop_when_connected(self, settings):
        client = _voice_client()
        connection = DiscordVoiceConnection(GUILD_ID, client, settings)

        await connection.reconnect()

        client.disconnect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_move_to(self, settings):
        client = _voice_client()
        target = _voice_channel(OTHER_CHANNEL_ID)
        client.guild.get_channel.return_value = target
        connection = DiscordVoiceConnection(GUILD_ID, client, settings)

        await connection.move_to(OTHER_CHANNEL_ID)

        client.move_to.assert_awaited_once_with(target)
        assert connection.channel_id == OTHER_CHANNEL_ID


# =============================================================================
# DiscordVoiceGateway
# =============================================================================


class TestDiscordVoiceGateway:
    @pytest.fixture
    def guild(self):
        guild = MagicMock(spec=discord.Guild)
        guild.voice_client = None
        return guild

    @pytest.fixture
    def bot(self, guild):
        bot = MagicMock()
        bot.get_guild.return_value = guild
        return bot

    def test_member_channel_id(self, bot, guild, settings):
        member = MagicMock()
        member.voice.channel.id = CHANNEL_ID
        guild.get_member.return_value = member

        gateway = DiscordVoiceGateway(bot, settings)

        assert gateway.member_channel_id(GUILD_ID, MEMBER_ID) == CHANNEL_ID

    def test_member_not_in_voice(self, bot, guild, settings):
        member = MagicMock()
        member.voice = None
        guild.get_member.return_value = member

        assert DiscordVoiceGateway(bot, settings).member_channel_id(GUILD_ID, MEMBER_ID) is None

    def test_member_unknown_guild(self, bot, settings):
        bot.get_guild.return_value = None

        assert DiscordVoiceGateway(bot, settings).member_channel_id(GUILD_ID, MEMBER_ID) is None

    @pytest.mark.asyncio
    async def test_connect_joins_channel(self, bot, guild, settings):
        channel = _voice_channel()
        client = _voice_client()
        channel.connect = AsyncMock(return_value=client)
        guild.get_channel.return_value = channel

        connection = await DiscordVoiceGateway(bot, settings).connect(GUILD_ID, CHANNEL_ID)

        channel.connect.assert_awaited_once_with(self_deaf=False, self_mute=False)
        assert connection.voice_client is client
        assert connection.guild_id == GUILD_ID

    @pytest.mark.asyncio
    async def test_connect_reuses_existing_client(self, bot, guild, settings):
        existing = _voice_client()
        guild.voice_client = existing
        channel = _voice_channel()
        channel.connect = AsyncMock()
        guild.get_channel.return_value = channel

        connection = await DiscordVoiceGateway(bot, settings).connect(GUILD_ID, CHANNEL_ID)

        channel.connect.assert_not_awaited()
        assert connection.voice_client is existing

    @pytest.mark.asyncio
    async def test_connect_to_non_voice_channel_fails(self, bot, guild, settings):
        guild.get_channel.return_value = MagicMock(spec=discord.TextChannel)

        with pytest.raises(VoiceConnectionError):
            await DiscordVoiceGateway(bot, settings).connect(GUILD_ID, CHANNEL_ID)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            TimeoutError(),
            discord.Forbidden(MagicMock(status=403, reason="Forbidden"), "Missing Access"),
            discord.ClientException("Already connected"),
        ],
    )
    async def test_connect_errors_wrapped(self, bot, guild, settings, error):
        channel = _voice_channel()
        channel.connect = AsyncMock(side_effect=error)
        guild.get_channel.return_value = channel

        with pytest.raises(VoiceConnectionError) as exc_info:
            await DiscordVoiceGateway(bot, settings).connect(GUILD_ID, CHANNEL_ID)

        assert exc_info.value.cause is error
        assert exc_info.value.channel_id == CHANNEL_ID
