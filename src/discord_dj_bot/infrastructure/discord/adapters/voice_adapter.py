"""Discord voice adapters implementing the voice gateway, connection and player ports."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import discord

from discord_dj_bot.application.interfaces.voice_adapter import (
    AudioPlayer,
    PlayerListener,
    VoiceConnection,
    VoiceGateway,
)
from discord_dj_bot.config.settings import AudioSettings
from discord_dj_bot.domain.music.value_objects import PlayerEvent, PlayerEventKind
from discord_dj_bot.domain.shared.exceptions import StreamAcquisitionError, VoiceConnectionError
from discord_dj_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_dj_bot.application.interfaces.stream_provider import AudioStream

logger = logging.getLogger(__name__)

VoiceChannelLike = discord.VoiceChannel | discord.StageChannel


class StartSignallingSource(discord.PCMVolumeTransformer):
    """Volume transformer that reports the first PCM frame it hands to the encoder."""

    def __init__(
        self, original: discord.AudioSource, volume: float, on_start: Callable[[], None]
    ) -> None:
        super().__init__(original, volume=volume)
        self._on_start: Callable[[], None] | None = on_start

    def read(self) -> bytes:
        data = super().read()
        if data and self._on_start is not None:
            on_start, self._on_start = self._on_start, None
            on_start()
        return data


class DiscordAudioPlayer(AudioPlayer):
    """Plays audio streams on a connection's voice client.

    discord.py runs sources on its own audio thread; every event is marshalled
    back onto the event loop before the listener sees it.
    """

    def __init__(
        self,
        connection: DiscordVoiceConnection,
        *,
        loop: asyncio.AbstractEventLoop,
        volume: float,
        ffmpeg_options: dict[str, str],
    ) -> None:
        self._connection = connection
        self._loop = loop
        self._volume = volume
        self._ffmpeg_options = ffmpeg_options
        self._listener: PlayerListener | None = None

    def set_listener(self, listener: PlayerListener) -> None:
        self._listener = listener

    def _emit(self, event: PlayerEvent) -> None:
        if self._listener is not None:
            self._listener(event)

    def _emit_threadsafe(self, event: PlayerEvent) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._emit, event)

    def create_source(self, stream: AudioStream, token: int) -> StartSignallingSource:
        source = discord.FFmpegPCMAudio(
            stream.stdout,
            pipe=True,
            before_options=self._ffmpeg_options.get("before_options") or None,
            options=self._ffmpeg_options.get("options") or None,
        )
        return StartSignallingSource(
            source,
            volume=self._volume,
            on_start=lambda: self._emit_threadsafe(PlayerEvent(PlayerEventKind.STARTED, token)),
        )

    def play(self, stream: AudioStream, token: int) -> None:
        voice_client = self._connection.voice_client
        if voice_client is None or not voice_client.is_connected():
            stream.close()
            raise StreamAcquisitionError(
                stream.source_reference,
                cause=RuntimeError(
                    ErrorMessages.NO_PLAYER_BOUND.format(guild_id=self._connection.guild_id)
                ),
            )

        try:
            if voice_client.is_playing() or voice_client.is_paused():
                voice_client.stop()

            source = self.create_source(stream, token)

            def after_callback(error: Exception | None = None) -> None:
                stream.close()
                if error:
                    logger.warning(LogTemplates.PLAYBACK_ERROR, self._connection.guild_id, error)
                    self._emit_threadsafe(PlayerEvent(PlayerEventKind.ERROR, token, error))
                else:
                    self._emit_threadsafe(PlayerEvent(PlayerEventKind.FINISHED, token))

            voice_client.play(source, after=after_callback)
        except discord.DiscordException as e:
            stream.close()
            raise StreamAcquisitionError(stream.source_reference, cause=e) from e

    def stop(self) -> None:
        voice_client = self._connection.voice_client
        if voice_client is not None and (voice_client.is_playing() or voice_client.is_paused()):
            voice_client.stop()

    def pause(self) -> bool:
        voice_client = self._connection.voice_client
        if voice_client is not None and voice_client.is_playing():
            voice_client.pause()
            return True
        return False

    def resume(self) -> bool:
        voice_client = self._connection.voice_client
        if voice_client is not None and voice_client.is_paused():
            voice_client.resume()
            return True
        return False


class DiscordVoiceConnection(VoiceConnection):
    def __init__(
        self,
        guild_id: int,
        voice_client: discord.VoiceClient,
        settings: AudioSettings | None = None,
    ) -> None:
        self.guild_id = guild_id
        self._settings = settings or AudioSettings()
        self._voice_client: discord.VoiceClient | None = voice_client
        self._channel: VoiceChannelLike | None = voice_client.channel  # type: ignore[assignment]

    @property
    def voice_client(self) -> discord.VoiceClient | None:
        return self._voice_client

    @property
    def channel_id(self) -> int | None:
        return self._channel.id if self._channel is not None else None

    def is_connected(self) -> bool:
        return self._voice_client is not None and self._voice_client.is_connected()

    async def move_to(self, channel_id: int) -> None:
        if self._voice_client is None:
            raise VoiceConnectionError(channel_id)
        channel = _voice_channel(self._voice_client.guild, channel_id)
        try:
            async with asyncio.timeout(self._settings.connect_timeout_s):
                await self._voice_client.move_to(channel)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise VoiceConnectionError(channel_id, cause=e) from e
        self._channel = channel
        logger.info(LogTemplates.VOICE_CONNECTED, channel_id, self.guild_id)

    async def reconnect(self) -> None:
        if self.is_connected():
            return
        channel = self._channel
        if channel is None:
            raise VoiceConnectionError()

        if self._voice_client is not None:
            with contextlib.suppress(discord.ClientException):
                await self._voice_client.disconnect(force=True)
        self._voice_client = await _connect(channel, self._settings.connect_timeout_s)

    async def destroy(self) -> None:
        voice_client, self._voice_client = self._voice_client, None
        if voice_client is not None:
            await voice_client.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, self.guild_id)

    def create_player(self, volume: float) -> DiscordAudioPlayer:
        return DiscordAudioPlayer(
            self,
            loop=asyncio.get_running_loop(),
            volume=volume,
            ffmpeg_options=self._settings.ffmpeg_options,
        )


class DiscordVoiceGateway(VoiceGateway):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()

    def _get_guild(self, guild_id: int) -> discord.Guild | None:
        return self._bot.get_guild(guild_id)

    def member_channel_id(self, guild_id: int, member_id: int) -> int | None:
        guild = self._get_guild(guild_id)
        if guild is None:
            return None
        member = guild.get_member(member_id)
        if member is None or member.voice is None or member.voice.channel is None:
            return None
        return member.voice.channel.id

    async def connect(self, guild_id: int, channel_id: int) -> DiscordVoiceConnection:
        guild = self._get_guild(guild_id)
        if guild is None:
            raise VoiceConnectionError(channel_id)
        channel = _voice_channel(guild, channel_id)

        existing = guild.voice_client
        if isinstance(existing, discord.VoiceClient) and existing.is_connected():
            connection = DiscordVoiceConnection(guild_id, existing, self._settings)
            if connection.channel_id != channel_id:
                await connection.move_to(channel_id)
            return connection

        voice_client = await _connect(channel, self._settings.connect_timeout_s)
        return DiscordVoiceConnection(guild_id, voice_client, self._settings)


def _voice_channel(guild: discord.Guild, channel_id: int) -> VoiceChannelLike:
    channel = guild.get_channel(channel_id)
    if not isinstance(channel, VoiceChannelLike):
        raise VoiceConnectionError(channel_id)
    return channel


async def _connect(channel: VoiceChannelLike, timeout: float) -> discord.VoiceClient:
    try:
        async with asyncio.timeout(timeout):
            return await channel.connect(self_deaf=False, self_mute=False)
    except TimeoutError as e:
        logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel.id)
        raise VoiceConnectionError(channel.id, cause=e) from e
    except discord.Forbidden as e:
        logger.error(LogTemplates.VOICE_NO_PERMISSION, channel.id)
        raise VoiceConnectionError(channel.id, cause=e) from e
    except discord.ClientException as e:
        logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
        raise VoiceConnectionError(channel.id, cause=e) from e
