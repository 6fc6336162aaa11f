#!/usr/bin/env python3
"""Main entry point for the Discord DJ Bot.

Loads settings, configures logging, checks that the external audio tools
(yt-dlp and FFmpeg) can be found, then runs the bot until it is shut down.
"""

from __future__ import annotations

import json
import logging
import logging.config
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from discord_dj_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_dj_bot.config.settings import AudioSettings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

FFMPEG_BINARY = "ffmpeg"


def setup_logging(log_level: str = "INFO", config_path: Path = _LOGGING_CONFIG_PATH) -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        config = json.loads(Path(config_path).read_text(encoding="utf-8"))
        logging.config.dictConfig(config)
    except (OSError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning(LogTemplates.LOGGING_CONFIG_FALLBACK, config_path)

    logging.getLogger().setLevel(resolved_level)


def check_audio_tools(audio: AudioSettings) -> list[str]:
    """Log where the streaming tools live and return the ones that are missing.

    Missing tools are not fatal: every song then fails to stream and is
    skipped, which is reported in the guild's channel.
    """
    logger = logging.getLogger(__name__)
    missing: list[str] = []

    for binary in (audio.ytdlp_binary, FFMPEG_BINARY):
        location = shutil.which(binary)
        if location is None:
            logger.warning(LogTemplates.AUDIO_TOOL_MISSING, binary)
            missing.append(binary)
        else:
            logger.info(LogTemplates.AUDIO_TOOL_FOUND, binary, location)

    if audio.usable_cookies_file is not None:
        logger.info(LogTemplates.AUDIO_COOKIES_LOADED, audio.usable_cookies_file)
    return missing


def main() -> int:
    from discord_dj_bot.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level, settings.logging_config or _LOGGING_CONFIG_PATH)

    logger = logging.getLogger(__name__)

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    logger.info(LogTemplates.BOT_COMMAND_PREFIX, settings.discord.command_prefix)
    check_audio_tools(settings.audio)

    from discord_dj_bot.config.container import create_container
    from discord_dj_bot.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        bot.run_with_graceful_shutdown(token_value)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1
    logger.info(LogTemplates.BOT_STOPPED)
    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
