"""Voice channel guard functions for Discord cogs."""

from discord_dj_bot.infrastructure.discord.guards.voice_guards import (
    ensure_can_speak,
    get_member,
    require_playable_voice_channel,
    require_voice_channel,
)

__all__ = [
    "ensure_can_speak",
    "get_member",
    "require_playable_voice_channel",
    "require_voice_channel",
]
