"""Audio infrastructure - yt-dlp resolver and byte-stream provider."""

from discord_dj_bot.infrastructure.audio.models import (
    ThumbnailInfo,
    YtDlpOpts,
    YtDlpSearchResult,
    YtDlpVideoInfo,
)
from discord_dj_bot.infrastructure.audio.ytdlp_resolver import YtDlpResolver
from discord_dj_bot.infrastructure.audio.ytdlp_stream import YtDlpAudioStream, YtDlpStreamProvider

__all__ = [
    "ThumbnailInfo",
    "YtDlpAudioStream",
    "YtDlpOpts",
    "YtDlpResolver",
    "YtDlpSearchResult",
    "YtDlpStreamProvider",
    "YtDlpVideoInfo",
]
