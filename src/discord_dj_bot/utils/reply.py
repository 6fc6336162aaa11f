"""Utility functions for formatting chat messages."""

from __future__ import annotations

from functools import cache


@cache
def format_duration(seconds: int | float | None) -> str:
    """Render seconds as ``M:SS`` (or ``H:MM:SS`` from one hour); unknown is ``0:00``."""
    total_seconds = max(int(seconds or 0), 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def escape_link_text(text: str) -> str:
    """Keep square brackets in titles from breaking ``[title](url)`` markdown links."""
    return text.replace("[", "(").replace("]", ")")
