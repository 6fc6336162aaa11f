"""
yt-dlp Byte Stream Provider

Spawns the yt-dlp executable with its output piped to stdout so the audio
pipeline can read raw media bytes without touching disk.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import subprocess
import threading
from typing import IO

from discord_dj_bot.application.interfaces.stream_provider import AudioStream, StreamProvider
from discord_dj_bot.config.settings import AudioSettings
from discord_dj_bot.domain.shared.exceptions import StreamAcquisitionError
from discord_dj_bot.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

PROCESS_WAIT_TIMEOUT = 1.0


class YtDlpAudioStream(AudioStream):
    """A running yt-dlp process whose stdout carries the media bytes."""

    def __init__(self, process: subprocess.Popen[bytes], source_reference: str) -> None:
        self._process = process
        self.source_reference = source_reference
        self._closed = False
        self._lock = threading.Lock()

        self._stderr_thread: threading.Thread | None = None
        if process.stderr is not None:
            self._stderr_thread = threading.Thread(
                target=self._drain_stderr,
                name=f"yt-dlp-stderr-{process.pid}",
                daemon=True,
            )
            self._stderr_thread.start()

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def stdout(self) -> IO[bytes]:
        if self._process.stdout is None:
            raise StreamAcquisitionError(self.source_reference)
        return self._process.stdout

    @property
    def closed(self) -> bool:
        return self._closed

    def _drain_stderr(self) -> None:
        stderr = self._process.stderr
        if stderr is None:
            return
        try:
            for raw in iter(stderr.readline, b""):
                line = raw.decode("utf-8", errors="replace").rstrip()
                if line:
                    logger.debug(LogTemplates.STREAM_STDERR, self._process.pid, line)
        except (OSError, ValueError):
            # pipe closed underneath us during close()
            return

    def close(self) -> None:
        """Terminate the process and release its pipes. Safe to call repeatedly."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        process = self._process
        try:
            if process.poll() is None:
                process.kill()
            process.wait(timeout=PROCESS_WAIT_TIMEOUT)
            logger.debug(LogTemplates.STREAM_TERMINATED, process.pid)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(LogTemplates.STREAM_CLEANUP_ERROR, process.pid, e)

        for pipe in (process.stdout, process.stderr):
            if pipe is not None:
                try:
                    pipe.close()
                except OSError as e:
                    logger.debug(LogTemplates.STREAM_CLEANUP_ERROR, process.pid, e)


class YtDlpStreamProvider(StreamProvider):
    """Opens audio streams by running ``yt-dlp --output -``."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()

    def build_command(self, source_reference: str) -> list[str]:
        binary = shutil.which(self._settings.ytdlp_binary)
        if binary is None:
            raise StreamAcquisitionError(
                source_reference,
                cause=FileNotFoundError(
                    ErrorMessages.YTDLP_BINARY_NOT_FOUND.format(binary=self._settings.ytdlp_binary)
                ),
            )

        command = [
            binary,
            "--output",
            "-",
            "--format",
            self._settings.ytdlp_format,
            "--quiet",
            "--no-playlist",
        ]
        cookies = self._settings.usable_cookies_file
        if cookies is not None:
            command += ["--cookies", str(cookies)]
        command.append(source_reference)
        return command

    def _spawn(self, source_reference: str) -> YtDlpAudioStream:
        command = self.build_command(source_reference)
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise StreamAcquisitionError(source_reference, cause=e) from e

        logger.debug(LogTemplates.STREAM_SPAWNED, process.pid, source_reference)
        return YtDlpAudioStream(process, source_reference)

    async def open(self, source_reference: str) -> YtDlpAudioStream:
        return await asyncio.to_thread(self._spawn, source_reference)
