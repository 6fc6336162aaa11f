"""Discord cogs - command handlers."""

from discord_dj_bot.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = ["MusicCog"]
