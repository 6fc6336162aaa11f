"""Notifier that posts playback updates into the guild's text channel."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import discord

from discord_dj_bot.application.interfaces.notifier import Notifier
from discord_dj_bot.domain.shared.messages import DiscordUIMessages, LogTemplates
from discord_dj_bot.infrastructure.discord.embeds import added_to_queue_embed, now_playing_embed

if TYPE_CHECKING:
    from discord_dj_bot.domain.music.entities import GuildQueue, Song

logger = logging.getLogger(__name__)


class DiscordNotifier(Notifier):
    """Sends embeds and status lines to ``queue.notify_target``.

    Delivery failures are logged and dropped; they never reach the playback engine.
    """

    def __init__(self, command_prefix: str = "!") -> None:
        self._prefix = command_prefix

    async def _send(self, queue: GuildQueue, what: str, **kwargs: Any) -> None:
        target = queue.notify_target
        if target is None:
            logger.debug(LogTemplates.NOTIFY_NO_TARGET, queue.guild_id, what)
            return
        try:
            await target.send(**kwargs)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.NOTIFY_SEND_FAILED, queue.guild_id, e)

    async def added_to_queue(self, queue: GuildQueue, song: Song, position: int) -> None:
        await self._send(queue, "added_to_queue", embed=added_to_queue_embed(song, position))

    async def now_playing(self, queue: GuildQueue, song: Song) -> None:
        await self._send(queue, "now_playing", embed=now_playing_embed(song))

    async def queue_empty(self, queue: GuildQueue) -> None:
        await self._send(
            queue,
            "queue_empty",
            content=DiscordUIMessages.STATE_QUEUE_FINISHED.format(prefix=self._prefix),
        )

    async def track_failed(self, queue: GuildQueue, song: Song | None) -> None:
        await self._send(queue, "track_failed", content=DiscordUIMessages.ERROR_PLAYBACK)

    async def stream_failed(self, queue: GuildQueue, song: Song) -> None:
        await self._send(queue, "stream_failed", content=DiscordUIMessages.ERROR_STREAM_FAILED)

    async def voice_channel_left(self, queue: GuildQueue) -> None:
        await self._send(queue, "voice_channel_left", content=DiscordUIMessages.ERROR_LEFT_VOICE)

    async def connection_failed(self, queue: GuildQueue) -> None:
        await self._send(queue, "connection_failed", content=DiscordUIMessages.ERROR_JOIN_FAILED)
