"""Embed builders for queue, playback and search replies."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import discord

from discord_dj_bot.domain.shared.messages import DiscordUIMessages
from discord_dj_bot.utils.reply import escape_link_text, format_duration, truncate

if TYPE_CHECKING:
    from discord_dj_bot.domain.music.entities import GuildQueue, Song, SongCandidate

PLAYBACK_COLOR = discord.Color(0x00FF00)
INFO_COLOR = discord.Color(0x0099FF)
QUEUE_PAGE_SIZE = 10
SEARCH_TITLE_LENGTH = 80

HELP_ENTRIES: tuple[tuple[str, str], ...] = (
    ("join", "Join your current voice channel"),
    ("play <url/search>", "Add a song to the queue from URL or search"),
    ("search <term>", "Search YouTube and show results"),
    ("queue", "Show the current music queue"),
    ("skip", "Skip the current song"),
    ("stop", "Stop playing and clear queue"),
    ("pause", "Pause the current song"),
    ("resume", "Resume the paused song"),
    ("clear", "Clear the music queue"),
    ("leave", "Leave the current voice channel"),
    ("help", "Show this help message"),
)


def song_link(title: str, url: str) -> str:
    return f"**[{escape_link_text(title)}]({url})**"


def format_queue_entry(position: int, song: Song) -> str:
    return (
        f"{position}. {song_link(song.title, song.source_reference)}"
        f" - {song.duration_formatted} | *{song.requester_name}*"
    )


def _song_embed(title: str, song: Song) -> discord.Embed:
    embed = discord.Embed(
        title=title,
        description=song_link(song.title, song.source_reference),
        color=PLAYBACK_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.add_field(name=DiscordUIMessages.FIELD_DURATION, value=song.duration_formatted)
    if song.thumbnail_url:
        embed.set_thumbnail(url=song.thumbnail_url)
    return embed


def added_to_queue_embed(song: Song, position: int) -> discord.Embed:
    embed = _song_embed(DiscordUIMessages.EMBED_ADDED_TITLE, song)
    embed.add_field(name=DiscordUIMessages.FIELD_POSITION, value=str(position))
    embed.add_field(name=DiscordUIMessages.FIELD_REQUESTED_BY, value=song.requester_name)
    return embed


def now_playing_embed(song: Song) -> discord.Embed:
    embed = _song_embed(DiscordUIMessages.EMBED_NOW_PLAYING_TITLE, song)
    embed.add_field(name=DiscordUIMessages.FIELD_REQUESTED_BY, value=song.requester_name)
    return embed


def queue_embed(queue: GuildQueue, page_size: int = QUEUE_PAGE_SIZE) -> discord.Embed:
    """List the first ``page_size`` songs, head first, with the total count."""
    songs = queue.songs
    lines = [format_queue_entry(idx, song) for idx, song in enumerate(songs[:page_size], start=1)]

    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_QUEUE_TITLE,
        description="\n".join(lines),
        color=INFO_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.add_field(name=DiscordUIMessages.FIELD_TOTAL_SONGS, value=str(len(songs)))

    if len(songs) > page_size:
        more = len(songs) - page_size
        embed.set_footer(text=DiscordUIMessages.EMBED_QUEUE_MORE.format(count=more))
    return embed


def search_results_embed(
    query: str, candidates: Sequence[SongCandidate], prefix: str
) -> discord.Embed:
    lines = []
    for idx, candidate in enumerate(candidates, start=1):
        duration = (
            format_duration(candidate.duration_seconds)
            if candidate.duration_seconds
            else DiscordUIMessages.UNKNOWN_DURATION
        )
        title = truncate(candidate.title, SEARCH_TITLE_LENGTH)
        lines.append(f"{idx}. {song_link(title, candidate.source_reference)} - `{duration}`")

    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_SEARCH_TITLE.format(query=truncate(query, 200)),
        description="\n".join(lines),
        color=INFO_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    embed.set_footer(text=DiscordUIMessages.EMBED_SEARCH_FOOTER.format(prefix=prefix))
    return embed


def help_embed(prefix: str) -> discord.Embed:
    embed = discord.Embed(
        title=DiscordUIMessages.EMBED_HELP_TITLE,
        description=DiscordUIMessages.EMBED_HELP_DESCRIPTION.format(prefix=prefix),
        color=INFO_COLOR,
        timestamp=discord.utils.utcnow(),
    )
    for usage, summary in HELP_ENTRIES:
        embed.add_field(name=f"{prefix}{usage}", value=summary)
    embed.set_footer(text=DiscordUIMessages.EMBED_HELP_FOOTER)
    return embed
