"""Playback Engine - sequences each guild's queue over its voice connection."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from functools import partial
from typing import TYPE_CHECKING, Any

from ...domain.music.value_objects import AdvanceRequest, PlaybackState, PlayerEvent, PlayerEventKind
from ...domain.shared.exceptions import (
    NotConnectedError,
    NothingPlayingError,
    NothingToSkipError,
    VoiceConnectionError,
)
from ...domain.shared.messages import DiscordUIMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import GuildQueue, Song
    from ...domain.music.repository import GuildQueueStore
    from ..interfaces.notifier import Notifier
    from ..interfaces.stream_provider import StreamProvider
    from ..interfaces.voice_adapter import AudioPlayer, VoiceConnection, VoiceGateway

logger = logging.getLogger(__name__)

Signal = AdvanceRequest | PlayerEvent


class PlaybackEngine:
    """Drives the per-guild playback state machine.

    Each guild gets one coordinating task that consumes advance requests and
    player events from its own channel, so head removal and advancing never
    interleave within a guild. Command operations mutate the queue directly
    between suspension points and invalidate the playback token when they
    supersede an in-flight attempt; the coordinator re-checks the token after
    every await and drops events that carry an old one.
    """

    def __init__(
        self,
        *,
        queue_store: GuildQueueStore,
        voice_gateway: VoiceGateway,
        stream_provider: StreamProvider,
        notifier: Notifier,
    ) -> None:
        self._queue_store = queue_store
        self._voice_gateway = voice_gateway
        self._stream_provider = stream_provider
        self._notifier = notifier

        self._channels: dict[DiscordSnowflake, asyncio.Queue[Signal]] = {}
        self._workers: dict[DiscordSnowflake, asyncio.Task[None]] = {}
        self._closed = False

    # ── Signal plumbing ─────────────────────────────────────────────

    def _channel(self, guild_id: DiscordSnowflake) -> asyncio.Queue[Signal]:
        channel = self._channels.get(guild_id)
        if channel is None:
            channel = asyncio.Queue()
            self._channels[guild_id] = channel

        worker = self._workers.get(guild_id)
        if worker is None or worker.done():
            self._workers[guild_id] = asyncio.create_task(
                self._run(guild_id, channel), name=f"playback-{guild_id}"
            )
        return channel

    def _post(self, guild_id: DiscordSnowflake, signal: Signal) -> None:
        if self._closed:
            return
        self._channel(guild_id).put_nowait(signal)

    def _on_player_event(self, guild_id: DiscordSnowflake, event: PlayerEvent) -> None:
        self._post(guild_id, event)

    async def _run(self, guild_id: DiscordSnowflake, channel: asyncio.Queue[Signal]) -> None:
        while True:
            signal = await channel.get()
            try:
                await self._dispatch(guild_id, signal)
            except Exception:
                logger.exception(LogTemplates.PLAYBACK_EVENT_LOOP_ERROR, signal, guild_id)
            finally:
                channel.task_done()

    async def _dispatch(self, guild_id: DiscordSnowflake, signal: Signal) -> None:
        queue = self._queue_store.get(guild_id)
        if isinstance(signal, AdvanceRequest):
            if queue.state is PlaybackState.IDLE and not queue.is_empty:
                await self._advance(queue)
            return
        await self._handle_player_event(queue, signal)

    async def wait_until_settled(self, guild_id: DiscordSnowflake) -> None:
        """Block until every pending signal for the guild has been processed."""
        channel = self._channels.get(guild_id)
        if channel is not None:
            await channel.join()

    # ── Coordinator ─────────────────────────────────────────────────

    async def _handle_player_event(self, queue: GuildQueue, event: PlayerEvent) -> None:
        if event.token != queue.playback_token:
            logger.debug(
                LogTemplates.PLAYBACK_STALE_EVENT,
                event.kind.value,
                event.token,
                queue.playback_token,
                queue.guild_id,
            )
            return

        if event.kind is PlayerEventKind.STARTED:
            if queue.state is not PlaybackState.CONNECTING or queue.head is None:
                return
            queue.transition_to(PlaybackState.ACTIVE)
            logger.info(LogTemplates.PLAYBACK_STARTED, queue.head.title, queue.guild_id)
            await self._notifier.now_playing(queue, queue.head)
            return

        if queue.state is not PlaybackState.DRAINING:
            queue.transition_to(PlaybackState.DRAINING)

        song = queue.pop_head()
        token = queue.next_token()
        title = song.title if song else None

        if event.kind is PlayerEventKind.ERROR:
            logger.warning(LogTemplates.TRACK_FAILED, title, queue.guild_id, event.error)
            await self._notifier.track_failed(queue, song)
            if queue.playback_token != token:
                logger.debug(LogTemplates.PLAYBACK_SUPERSEDED, token, queue.guild_id)
                return
        else:
            logger.info(LogTemplates.TRACK_FINISHED, title, queue.guild_id)

        await self._advance(queue)

    async def _advance(self, queue: GuildQueue) -> None:
        """Start the head song, dropping heads whose stream cannot be started."""
        while True:
            song = queue.head
            if song is None:
                queue.transition_to(PlaybackState.IDLE)
                logger.info(LogTemplates.QUEUE_EMPTY, queue.guild_id)
                await self._notifier.queue_empty(queue)
                return

            token = queue.next_token()
            queue.transition_to(PlaybackState.CONNECTING)

            connection = await self._ensure_connection(queue, token)
            if connection is None:
                return

            try:
                stream = await self._stream_provider.open(song.source_reference)
            except Exception as exc:
                if not await self._drop_failed_head(queue, song, token, exc):
                    return
                continue

            if queue.playback_token != token:
                logger.info(LogTemplates.PLAYBACK_SUPERSEDED, token, queue.guild_id)
                stream.close()
                return

            try:
                player = self._bind_player(queue, connection)
                player.play(stream, token)
            except Exception as exc:
                stream.close()
                if not await self._drop_failed_head(queue, song, token, exc):
                    return
                continue
            return

    async def _drop_failed_head(
        self, queue: GuildQueue, song: Song, token: int, exc: Exception
    ) -> bool:
        """Pop a head that could not start; return whether advancing may continue."""
        if queue.playback_token != token:
            return False
        logger.warning(LogTemplates.PLAYBACK_FAILED_START, song.title, queue.guild_id, exc_info=exc)
        queue.pop_head()
        await self._notifier.stream_failed(queue, song)
        return queue.playback_token == token

    async def _ensure_connection(self, queue: GuildQueue, token: int) -> VoiceConnection | None:
        connection: VoiceConnection | None = queue.connection
        if connection is not None and connection.is_connected():
            return connection

        if connection is not None:
            await self._discard_connection(queue)

        channel_id = None
        if queue.summoner_id is not None:
            channel_id = self._voice_gateway.member_channel_id(queue.guild_id, queue.summoner_id)

        if channel_id is None:
            self._reset(queue)
            await self._notifier.voice_channel_left(queue)
            return None

        try:
            connection = await self._voice_gateway.connect(queue.guild_id, channel_id)
        except VoiceConnectionError as exc:
            logger.warning(LogTemplates.VOICE_CLIENT_ERROR, exc.cause or exc)
            if queue.playback_token == token:
                self._reset(queue)
                await self._notifier.connection_failed(queue)
            return None

        self._adopt_connection(queue, connection)
        if queue.playback_token != token:
            logger.info(LogTemplates.PLAYBACK_SUPERSEDED, token, queue.guild_id)
            return None
        return connection

    def _adopt_connection(self, queue: GuildQueue, connection: VoiceConnection) -> None:
        if connection is not queue.connection:
            queue.connection = connection
            queue.player = None
        logger.info(LogTemplates.VOICE_CONNECTED, connection.channel_id, queue.guild_id)

    def _bind_player(self, queue: GuildQueue, connection: VoiceConnection) -> AudioPlayer:
        player: AudioPlayer | None = queue.player
        if player is None:
            player = connection.create_player(queue.volume)
            queue.player = player
        player.set_listener(partial(self._on_player_event, queue.guild_id))
        return player

    def _reset(self, queue: GuildQueue) -> int:
        """Drop every song and return to IDLE, invalidating any in-flight attempt."""
        count = queue.clear_all()
        queue.next_token()
        queue.transition_to(PlaybackState.IDLE)
        return count

    async def _discard_connection(self, queue: GuildQueue) -> None:
        connection = queue.connection
        queue.release_voice()
        if connection is None:
            return
        try:
            await connection.destroy()
        except Exception:
            logger.exception(LogTemplates.VOICE_CLEANUP_ERROR, queue.guild_id)

    # ── Operations ──────────────────────────────────────────────────

    def enqueue(
        self,
        guild_id: DiscordSnowflake,
        song: Song,
        *,
        summoner_id: DiscordSnowflake,
        notify_target: Any = None,
    ) -> int:
        """Append a song and start playback when the guild is idle.

        Returns:
            The song's 1-based position in the queue.
        """
        queue = self._queue_store.get(guild_id)
        queue.summoner_id = summoner_id
        if notify_target is not None:
            queue.notify_target = notify_target

        position = queue.add(song)
        logger.info(LogTemplates.QUEUE_ENQUEUED, song.title, position, guild_id)

        if queue.state is PlaybackState.IDLE:
            self._post(guild_id, AdvanceRequest())
        return position

    async def join(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake, *, notify_target: Any = None
    ) -> VoiceConnection:
        queue = self._queue_store.get(guild_id)
        if notify_target is not None:
            queue.notify_target = notify_target

        connection: VoiceConnection | None = queue.connection
        if connection is not None and connection.is_connected():
            if connection.channel_id != channel_id:
                await connection.move_to(channel_id)
            return connection

        if connection is not None:
            await self._discard_connection(queue)

        connection = await self._voice_gateway.connect(guild_id, channel_id)
        self._adopt_connection(queue, connection)
        return connection

    async def leave(self, guild_id: DiscordSnowflake) -> None:
        """Stop playback, drop the queue and destroy the voice connection."""
        queue = self._queue_store.peek(guild_id)
        if queue is None or queue.connection is None:
            raise NotConnectedError()

        player: AudioPlayer | None = queue.player
        self._reset(queue)
        if player is not None:
            player.stop()
        await self._discard_connection(queue)

    def skip(self, guild_id: DiscordSnowflake) -> Song:
        """Stop the current song so the coordinator advances to the next one.

        Raises:
            NothingPlayingError: No song is playing.
            NothingToSkipError: The current song is the last one queued.
        """
        queue = self._queue_store.peek(guild_id)
        if queue is None or not queue.is_playing or queue.player is None or queue.head is None:
            raise NothingPlayingError()
        if queue.queue_length <= 1:
            raise NothingToSkipError()

        song = queue.head
        logger.info(LogTemplates.TRACK_SKIPPED, song.title, guild_id)
        queue.transition_to(PlaybackState.DRAINING)
        queue.player.stop()
        return song

    def stop(self, guild_id: DiscordSnowflake) -> int:
        """Clear the queue and halt playback.

        Returns:
            The number of songs removed.
        """
        queue = self._queue_store.peek(guild_id)
        if queue is None or (queue.state is PlaybackState.IDLE and queue.is_empty):
            raise NothingPlayingError()

        count = self._reset(queue)
        if queue.player is not None:
            queue.player.stop()
        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return count

    def pause(self, guild_id: DiscordSnowflake) -> None:
        queue = self._queue_store.peek(guild_id)
        if queue is None or queue.player is None or queue.state is not PlaybackState.ACTIVE:
            raise NothingPlayingError()
        if not queue.player.pause():
            raise NothingPlayingError()
        queue.transition_to(PlaybackState.PAUSED)
        logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)

    def resume(self, guild_id: DiscordSnowflake) -> None:
        queue = self._queue_store.peek(guild_id)
        if queue is None or queue.player is None or queue.state is not PlaybackState.PAUSED:
            raise NothingPlayingError(DiscordUIMessages.ERROR_NOTHING_PAUSED)
        if not queue.player.resume():
            raise NothingPlayingError(DiscordUIMessages.ERROR_NOTHING_PAUSED)
        queue.transition_to(PlaybackState.ACTIVE)
        logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)

    def clear(self, guild_id: DiscordSnowflake) -> int:
        """Remove queued songs; the song in flight keeps playing.

        Returns:
            The number of songs removed.
        """
        queue = self._queue_store.peek(guild_id)
        if queue is None:
            return 0
        count = queue.clear_upcoming()
        logger.info(LogTemplates.QUEUE_CLEARED, count, guild_id)
        return count

    async def handle_voice_disconnect(self, guild_id: DiscordSnowflake) -> None:
        """Try one reconnect and restart the head on success.

        On failure the connection is dropped but the songs are kept.
        """
        queue = self._queue_store.peek(guild_id)
        if queue is None or queue.connection is None:
            return

        connection: VoiceConnection = queue.connection
        logger.warning(LogTemplates.VOICE_LOST, guild_id)
        # The old voice client reports its source finished while tearing down.
        token = queue.next_token()
        try:
            await connection.reconnect()
        except VoiceConnectionError:
            logger.warning(LogTemplates.VOICE_RECONNECT_FAILED, guild_id)
        else:
            logger.info(LogTemplates.VOICE_RECONNECTED, guild_id)
            if queue.playback_token == token and queue.connection is connection:
                queue.transition_to(PlaybackState.IDLE)
                self._post(guild_id, AdvanceRequest())
            return

        if queue.connection is not connection:
            return
        queue.next_token()
        queue.transition_to(PlaybackState.IDLE)
        await self._discard_connection(queue)

    def queue_snapshot(self, guild_id: DiscordSnowflake) -> GuildQueue | None:
        return self._queue_store.peek(guild_id)

    async def close(self) -> None:
        """Cancel coordinators and tear down every voice connection."""
        self._closed = True
        workers = list(self._workers.values())
        self._workers.clear()
        self._channels.clear()
        for worker in workers:
            worker.cancel()
        for worker in workers:
            with contextlib.suppress(asyncio.CancelledError):
                await worker

        for queue in self._queue_store:
            player: AudioPlayer | None = queue.player
            if queue.connection is None:
                continue
            self._reset(queue)
            if player is not None:
                player.stop()
            await self._discard_connection(queue)
