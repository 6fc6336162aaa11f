"""AudioResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_dj_bot.application.interfaces.audio_resolver import AudioResolver
from discord_dj_bot.config.settings import AudioSettings
from discord_dj_bot.domain.music.entities import SongCandidate
from discord_dj_bot.domain.shared.exceptions import NoResultsError, ResolutionError
from discord_dj_bot.domain.shared.messages import DiscordUIMessages, LogTemplates
from discord_dj_bot.infrastructure.audio.models import (
    DEFAULT_SEARCH_LIMIT,
    YtDlpOpts,
    YtDlpSearchResult,
    YtDlpVideoInfo,
)

logger = logging.getLogger(__name__)

URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://\S+$")

PLAYLIST_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"[?&]list="),
    re.compile(r"/playlist\?"),
    re.compile(r"/sets/"),
]


class YtDlpResolver(AudioResolver):
    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()

        cookies = self._settings.usable_cookies_file
        if cookies is not None:
            logger.info(LogTemplates.YTDLP_COOKIES_CONFIGURED, cookies)

        self._base_opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            cookiefile=str(cookies) if cookies is not None else None,
        )

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _get_search_opts(self) -> YtDlpOpts:
        return self._get_opts(noplaylist=False, extract_flat="in_playlist")

    @staticmethod
    def _extract_sync(target: str, opts: YtDlpOpts) -> dict[str, Any] | None:
        with YoutubeDL(params=cast(Any, opts.model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(target, download=False)
        return dict(data) if isinstance(data, dict) else None

    @staticmethod
    def _info_to_candidate(info: YtDlpVideoInfo) -> SongCandidate | None:
        reference = info.source_reference
        if not reference:
            return None
        return SongCandidate(
            title=info.title,
            source_reference=reference,
            duration_seconds=info.duration or 0,
            thumbnail_url=info.best_thumbnail,
        )

    def _candidates(self, data: dict[str, Any] | None) -> list[SongCandidate]:
        if data is None:
            return []
        result = YtDlpSearchResult.model_validate(data)
        candidates: list[SongCandidate] = []
        for entry in result.entries:
            candidate = self._info_to_candidate(entry)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def is_direct_reference(self, query: str) -> bool:
        query = query.strip()
        if not URL_PATTERN.match(query):
            return False
        return not any(pattern.search(query) for pattern in PLAYLIST_PATTERNS)

    async def resolve(self, query: str) -> SongCandidate:
        direct = self.is_direct_reference(query)
        logger.debug(LogTemplates.YTDLP_RESOLVING, query, direct)

        target = query.strip() if direct else f"ytsearch1:{query}"
        try:
            data = await asyncio.to_thread(self._extract_sync, target, self._get_opts())
        except Exception as exc:
            logger.exception(LogTemplates.YTDLP_FAILED_RESOLVE, query)
            raise ResolutionError(query, cause=exc) from exc

        if direct:
            candidate = (
                self._info_to_candidate(YtDlpVideoInfo.model_validate(data)) if data else None
            )
            if candidate is None:
                raise ResolutionError(query)
            return candidate

        candidates = self._candidates(data)
        if not candidates:
            logger.info(LogTemplates.YTDLP_NO_RESULTS, query)
            raise NoResultsError(query)
        return candidates[0]

    async def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[SongCandidate]:
        target = f"ytsearch{limit}:{query}"
        try:
            data = await asyncio.to_thread(self._extract_sync, target, self._get_search_opts())
        except Exception as exc:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            raise ResolutionError(
                query, cause=exc, message=DiscordUIMessages.ERROR_SEARCH_FAILED
            ) from exc

        candidates = self._candidates(data)[:limit]
        if not candidates:
            logger.info(LogTemplates.YTDLP_NO_RESULTS, query)
            raise NoResultsError(query)
        return candidates

