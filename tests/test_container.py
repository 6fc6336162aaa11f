"""
Unit Tests for Dependency Injection Container

Tests for:
- Lazy initialization and caching of components
- Bot instance management (set_bot, bot property, error when not set)
- Wiring of the playback engine
- Shutdown
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_dj_bot.application.services.playback_service import PlaybackEngine
from discord_dj_bot.config.container import Container, create_container
from discord_dj_bot.config.settings import AudioSettings, DiscordSettings, Settings
from discord_dj_bot.infrastructure.audio.ytdlp_resolver import YtDlpResolver
from discord_dj_bot.infrastructure.audio.ytdlp_stream import YtDlpStreamProvider
from discord_dj_bot.infrastructure.discord.adapters.voice_adapter import DiscordVoiceGateway
from discord_dj_bot.infrastructure.discord.notifier import DiscordNotifier
from discord_dj_bot.infrastructure.memory.queue_store import InMemoryGuildQueueStore


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        discord=DiscordSettings(token="test", command_prefix="?"),
        audio=AudioSettings(cookies_file=None, default_volume=0.7),
    )


@pytest.fixture
def container(settings):
    return create_container(settings)


@pytest.fixture
def mock_bot():
    """Mock Discord bot instance."""
    bot = MagicMock()
    bot.user.id = 123456789
    return bot


class TestContainerBasics:
    """Tests for settings and bot management."""

    def test_create_container(self, settings):
        container = create_container(settings)

        assert isinstance(container, Container)
        assert container.settings is settings

    def test_bot_not_set_raises(self, container):
        with pytest.raises(RuntimeError, match="Bot not initialized"):
            _ = container.bot

    def test_set_bot(self, container, mock_bot):
        container.set_bot(mock_bot)

        assert container.bot is mock_bot


class TestLazyComponents:
    """Tests for lazily created, cached components."""

    def test_queue_store(self, container):
        store = container.queue_store

        assert isinstance(store, InMemoryGuildQueueStore)
        assert container.queue_store is store
        assert store.get(1).volume == 0.7

    def test_audio_resolver(self, container):
        assert isinstance(container.audio_resolver, YtDlpResolver)
        assert container.audio_resolver is container.audio_resolver

    def test_stream_provider(self, container):
        assert isinstance(container.stream_provider, YtDlpStreamProvider)

    def test_notifier_uses_prefix(self, container):
        notifier = container.notifier

        assert isinstance(notifier, DiscordNotifier)
        assert notifier._prefix == "?"

    def test_voice_gateway_requires_bot(self, container, mock_bot):
        with pytest.raises(RuntimeError):
            _ = container.voice_gateway

        container.set_bot(mock_bot)
        assert isinstance(container.voice_gateway, DiscordVoiceGateway)

    def test_playback_engine_wired(self, container, mock_bot):
        container.set_bot(mock_bot)

        engine = container.playback_engine

        assert isinstance(engine, PlaybackEngine)
        assert container.playback_engine is engine
        assert engine._queue_store is container.queue_store
        assert engine._notifier is container.notifier


class TestShutdown:
    """Tests for container shutdown."""

    @pytest.mark.asyncio
    async def test_shutdown_without_engine(self, container):
        await container.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_closes_engine(self, container):
        engine = MagicMock()
        engine.close = AsyncMock()
        container._playback_engine = engine

        await container.shutdown()

        engine.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_shutdown_survives_engine_error(self, container):
        engine = MagicMock()
        engine.close = AsyncMock(side_effect=RuntimeError("boom"))
        container._playback_engine = engine

        await container.shutdown()
