"""Reusable voice-channel guard functions for prefix commands.

These are free functions that accept the command context explicitly rather
than relying on a specific cog instance. Each raises a ``DomainError`` that
the cog's error handler turns into the user-facing reply.
"""

from __future__ import annotations

import discord
from discord.ext import commands

from discord_dj_bot.domain.shared.exceptions import MissingPermissionError, NotInVoiceChannelError

VoiceChannelLike = discord.VoiceChannel | discord.StageChannel


def get_member(ctx: commands.Context) -> discord.Member:
    """Return the invoking guild member; commands are unavailable in DMs."""
    if ctx.guild is None or not isinstance(ctx.author, discord.Member):
        raise commands.NoPrivateMessage()
    return ctx.author


def require_voice_channel(ctx: commands.Context) -> VoiceChannelLike:
    """Return the caller's current voice channel."""
    member = get_member(ctx)
    if member.voice is None or member.voice.channel is None:
        raise NotInVoiceChannelError()
    return member.voice.channel


def ensure_can_speak(channel: VoiceChannelLike, me: discord.Member) -> None:
    """Check the bot may both connect to and speak in ``channel``."""
    permissions = channel.permissions_for(me)
    missing = tuple(
        name for name in ("connect", "speak") if not getattr(permissions, name, False)
    )
    if missing:
        raise MissingPermissionError(permissions=missing)


def require_playable_voice_channel(ctx: commands.Context) -> VoiceChannelLike:
    """Caller's voice channel, verified for the bot's connect and speak permissions."""
    channel = require_voice_channel(ctx)
    assert ctx.guild is not None
    ensure_can_speak(channel, ctx.guild.me)
    return channel
