"""Console logging formatter."""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_PREFIX = "discord_dj_bot."


class ColoredFormatter(logging.Formatter):
    """Colours the level name and shortens this package's logger names.

    Colours are disabled when ``NO_COLOR`` is set or stdout is not a TTY.
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        if record.name.startswith(PACKAGE_PREFIX):
            record.name = record.name[len(PACKAGE_PREFIX):]
        if self._use_color():
            color = self.COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)
