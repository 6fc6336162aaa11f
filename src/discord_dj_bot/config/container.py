"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the queue store, adapters and playback engine.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_resolver import AudioResolver
    from ..application.interfaces.notifier import Notifier
    from ..application.interfaces.stream_provider import StreamProvider
    from ..application.interfaces.voice_adapter import VoiceGateway
    from ..application.services.playback_service import PlaybackEngine
    from ..domain.music.repository import GuildQueueStore
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. The queue store is
    created once and shared by every handler for the life of the process.
    """

    settings: Settings
    _bot: Bot | None = None

    _queue_store: GuildQueueStore | None = None

    # Infrastructure adapters
    _audio_resolver: AudioResolver | None = None
    _stream_provider: StreamProvider | None = None
    _voice_gateway: VoiceGateway | None = None
    _notifier: Notifier | None = None

    # Application services
    _playback_engine: PlaybackEngine | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    @property
    def queue_store(self) -> GuildQueueStore:
        if self._queue_store is None:
            from ..infrastructure.memory.queue_store import InMemoryGuildQueueStore

            self._queue_store = InMemoryGuildQueueStore(
                default_volume=self.settings.audio.default_volume
            )
        return self._queue_store

    @property
    def audio_resolver(self) -> AudioResolver:
        if self._audio_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._audio_resolver = YtDlpResolver(self.settings.audio)
        return self._audio_resolver

    @property
    def stream_provider(self) -> StreamProvider:
        if self._stream_provider is None:
            from ..infrastructure.audio.ytdlp_stream import YtDlpStreamProvider

            self._stream_provider = YtDlpStreamProvider(self.settings.audio)
        return self._stream_provider

    @property
    def voice_gateway(self) -> VoiceGateway:
        if self._voice_gateway is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceGateway

            self._voice_gateway = DiscordVoiceGateway(self.bot, self.settings.audio)
        return self._voice_gateway

    @property
    def notifier(self) -> Notifier:
        if self._notifier is None:
            from ..infrastructure.discord.notifier import DiscordNotifier

            self._notifier = DiscordNotifier(self.settings.discord.command_prefix)
        return self._notifier

    @property
    def playback_engine(self) -> PlaybackEngine:
        if self._playback_engine is None:
            from ..application.services.playback_service import PlaybackEngine

            self._playback_engine = PlaybackEngine(
                queue_store=self.queue_store,
                voice_gateway=self.voice_gateway,
                stream_provider=self.stream_provider,
                notifier=self.notifier,
            )
        return self._playback_engine

    # === Lifecycle ===

    async def shutdown(self) -> None:
        """Stop playback everywhere and release voice connections."""
        if self._playback_engine is not None:
            try:
                await self._playback_engine.close()
            except Exception as exc:
                logger.warning("Failed closing playback engine: %r", exc)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
