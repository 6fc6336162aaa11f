"""Prefix-command music cog delegating to the playback engine and resolver."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_dj_bot.domain.music.entities import Song, SongCandidate
from discord_dj_bot.domain.shared.exceptions import DomainError, ValidationError
from discord_dj_bot.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_dj_bot.infrastructure.discord.embeds import (
    help_embed,
    queue_embed,
    search_results_embed,
)
from discord_dj_bot.infrastructure.discord.guards.voice_guards import (
    get_member,
    require_playable_voice_channel,
)

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

        # Last ``search`` results per (guild, member), consumed by ``play <n>``.
        self._search_results: dict[tuple[int, int], list[SongCandidate]] = {}

    @property
    def prefix(self) -> str:
        return self.container.settings.discord.command_prefix

    async def cog_unload(self) -> None:
        self._search_results.clear()

    async def cog_before_invoke(self, ctx: commands.Context) -> None:
        logger.debug(
            LogTemplates.COMMAND_RECEIVED,
            getattr(ctx.command, "qualified_name", "<unknown>"),
            ctx.author.id,
            ctx.guild.id if ctx.guild else None,
        )

    async def _reply(self, ctx: commands.Context, content: str | None = None, **kwargs) -> None:
        try:
            await ctx.send(content, **kwargs)
        except discord.HTTPException as e:
            logger.warning(
                LogTemplates.NOTIFY_SEND_FAILED, ctx.guild.id if ctx.guild else None, e
            )

    # ─────────────────────────────────────────────────────────────────
    # Voice connection
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="join")
    @commands.guild_only()
    async def join(self, ctx: commands.Context) -> None:
        channel = require_playable_voice_channel(ctx)
        assert ctx.guild is not None

        await self.container.playback_engine.join(
            ctx.guild.id, channel.id, notify_target=ctx.channel
        )
        await self._reply(ctx, DiscordUIMessages.SUCCESS_JOINED.format(channel=channel.name))

    @commands.command(name="leave")
    @commands.guild_only()
    async def leave(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        await self.container.playback_engine.leave(ctx.guild.id)
        await self._reply(ctx, DiscordUIMessages.SUCCESS_LEFT)

    # ─────────────────────────────────────────────────────────────────
    # Queueing
    # ─────────────────────────────────────────────────────────────────

    def _pick_search_result(self, ctx: commands.Context, query: str) -> SongCandidate | None:
        """Resolve ``play <n>`` against the caller's last search, if there is one."""
        if not query.isdigit():
            return None
        assert ctx.guild is not None
        results = self._search_results.get((ctx.guild.id, ctx.author.id))
        if not results:
            return None

        index = int(query)
        if not 1 <= index <= len(results):
            raise ValidationError(
                DiscordUIMessages.ERROR_INVALID_PICK.format(count=len(results)), field="query"
            )
        return results[index - 1]

    @commands.command(name="play", aliases=["p"])
    @commands.guild_only()
    async def play(self, ctx: commands.Context, *, query: str = "") -> None:
        require_playable_voice_channel(ctx)
        member = get_member(ctx)
        assert ctx.guild is not None

        query = query.strip()
        if not query:
            await self._reply(ctx, DiscordUIMessages.ERROR_MISSING_QUERY)
            return

        candidate = self._pick_search_result(ctx, query)
        if candidate is None:
            await self._reply(ctx, DiscordUIMessages.STATE_SEARCHING)
            candidate = await self.container.audio_resolver.resolve(query)

        song = Song.from_candidate(
            candidate,
            requester_id=member.id,
            requester_name=member.display_name,
        )

        engine = self.container.playback_engine
        position = engine.enqueue(
            ctx.guild.id, song, summoner_id=member.id, notify_target=ctx.channel
        )
        queue = engine.queue_snapshot(ctx.guild.id)
        if queue is not None:
            await self.container.notifier.added_to_queue(queue, song, position)

    @commands.command(name="search")
    @commands.guild_only()
    async def search(self, ctx: commands.Context, *, query: str = "") -> None:
        assert ctx.guild is not None
        query = query.strip()
        if not query:
            await self._reply(ctx, DiscordUIMessages.ERROR_MISSING_SEARCH_TERM)
            return

        await self._reply(ctx, DiscordUIMessages.STATE_SEARCHING_YOUTUBE)
        results = await self.container.audio_resolver.search(
            query, limit=self.container.settings.audio.search_limit
        )
        self._search_results[(ctx.guild.id, ctx.author.id)] = results
        await self._reply(ctx, embed=search_results_embed(query, results, self.prefix))

    @commands.command(name="queue", aliases=["q"])
    @commands.guild_only()
    async def queue(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        queue = self.container.playback_engine.queue_snapshot(ctx.guild.id)
        if queue is None or queue.is_empty:
            await self._reply(ctx, DiscordUIMessages.STATE_QUEUE_EMPTY)
            return

        page_size = self.container.settings.audio.queue_page_size
        await self._reply(ctx, embed=queue_embed(queue, page_size))

    @commands.command(name="clear")
    @commands.guild_only()
    async def clear(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        count = self.container.playback_engine.clear(ctx.guild.id)
        if count == 0:
            await self._reply(ctx, DiscordUIMessages.STATE_QUEUE_ALREADY_EMPTY)
            return
        await self._reply(ctx, DiscordUIMessages.SUCCESS_CLEARED.format(count=count))

    # ─────────────────────────────────────────────────────────────────
    # Playback control
    # ─────────────────────────────────────────────────────────────────

    @commands.command(name="skip", aliases=["s"])
    @commands.guild_only()
    async def skip(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        self.container.playback_engine.skip(ctx.guild.id)
        await self._reply(ctx, DiscordUIMessages.SUCCESS_SKIPPED)

    @commands.command(name="stop")
    @commands.guild_only()
    async def stop(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        self.container.playback_engine.stop(ctx.guild.id)
        await self._reply(ctx, DiscordUIMessages.SUCCESS_STOPPED)

    @commands.command(name="pause")
    @commands.guild_only()
    async def pause(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        self.container.playback_engine.pause(ctx.guild.id)
        await self._reply(ctx, DiscordUIMessages.SUCCESS_PAUSED)

    @commands.command(name="resume")
    @commands.guild_only()
    async def resume(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        self.container.playback_engine.resume(ctx.guild.id)
        await self._reply(ctx, DiscordUIMessages.SUCCESS_RESUMED)

    @commands.command(name="help")
    async def help(self, ctx: commands.Context) -> None:
        await self._reply(ctx, embed=help_embed(self.prefix))

    # ─────────────────────────────────────────────────────────────────
    # Events and errors
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        if self.bot.user is None or member.id != self.bot.user.id:
            return
        if before.channel is not None and after.channel is None:
            await self.container.playback_engine.handle_voice_disconnect(member.guild.id)

    @commands.Cog.listener()
    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        if isinstance(error, commands.CommandNotFound):
            await self._reply(
                ctx, DiscordUIMessages.ERROR_UNKNOWN_COMMAND.format(prefix=self.prefix)
            )

    async def cog_command_error(self, ctx: commands.Context, error: Exception) -> None:
        original = getattr(error, "original", error)
        command_name = getattr(ctx.command, "qualified_name", "<unknown>")

        if isinstance(original, DomainError):
            logger.info(
                LogTemplates.COMMAND_REJECTED,
                command_name,
                ctx.guild.id if ctx.guild else None,
                original.code,
            )
            await self._reply(ctx, original.message)
            return

        if isinstance(original, commands.NoPrivateMessage):
            return

        logger.exception(LogTemplates.COMMAND_ERROR, command_name, exc_info=original)
        await self._reply(ctx, DiscordUIMessages.ERROR_GENERIC)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
