"""Pydantic models for yt-dlp data transformation and configuration.

These are infrastructure-specific models for parsing external yt-dlp data
and configuring yt-dlp options.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_dj_bot.domain.shared.types import HttpUrlStr, NonEmptyStr, PositiveInt

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
DEFAULT_SEARCH_LIMIT: Final[int] = 5


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class ThumbnailInfo(BaseModel):
    """A single thumbnail entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: HttpUrlStr | None = None

    @field_validator("url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        return v


class YtDlpVideoInfo(BaseModel):
    """Trimmed yt-dlp extraction result for a single video.

    Works for both full extractions and flat search entries. Extra fields from
    yt-dlp are silently ignored; before-validators coerce garbage gracefully.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    webpage_url: HttpUrlStr | None = None
    url: NonEmptyStr | None = None
    title: NonEmptyStr = "Unknown Title"
    duration: int | None = None
    thumbnail: HttpUrlStr | None = None
    thumbnails: list[ThumbnailInfo] = Field(default_factory=list)

    @field_validator("webpage_url", "url", "thumbnail", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        """Fall back to default when yt-dlp sends empty or non-string title."""
        if not isinstance(v, str) or not v.strip():
            return "Unknown Title"
        return v

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> int | None:
        """Coerce to non-negative int; return None for garbage values."""
        if v is None:
            return None
        try:
            val = int(v)
            return val if val >= 0 else None
        except (TypeError, ValueError):
            return None

    @field_validator("thumbnails", mode="before")
    @classmethod
    def _coerce_thumbnails(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [t for t in v if isinstance(t, dict)]

    @property
    def source_reference(self) -> str | None:
        """Canonical page URL, falling back to the flat-entry URL."""
        if self.webpage_url:
            return self.webpage_url
        if self.url and self.url.startswith(("http://", "https://")):
            return self.url
        return None

    @property
    def best_thumbnail(self) -> str | None:
        if self.thumbnail:
            return self.thumbnail
        for thumb in reversed(self.thumbnails):
            if thumb.url:
                return thumb.url
        return None


class YtDlpSearchResult(BaseModel):
    """A ``ytsearchN:`` extraction: a playlist-shaped dict of entries."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    entries: list[YtDlpVideoInfo] = Field(default_factory=list)

    @field_validator("entries", mode="before")
    @classmethod
    def _drop_empty_entries(cls, v: Any) -> list[Any]:
        if not isinstance(v, list):
            return []
        return [e for e in v if isinstance(e, dict)]


# ── yt-dlp option models ───────────────────────────────────────────────


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    no_warnings: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    default_search: NonEmptyStr = "ytsearch"
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    format: NonEmptyStr | None = None
    skip_download: bool = True
    extract_flat: NonEmptyStr | bool = False
    cookiefile: NonEmptyStr | None = None
