"""
Unit Tests for Bot Lifecycle

Tests for src/discord_dj_bot/infrastructure/discord/bot.py:
- Intents, prefix and help command setup
- setup_hook loading the music cog and installing the loop exception handler
- Presence on ready
- Container shutdown on close
- create_bot factory
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from discord_dj_bot.infrastructure.discord.bot import (
    COGS,
    DjBot,
    _log_unhandled_async_error,
    create_bot,
)


@pytest.fixture
def mock_settings():
    """Create mock settings."""
    settings = MagicMock()
    settings.discord.command_prefix = "!"
    return settings


@pytest.fixture
def mock_container():
    """Create mock container."""
    container = MagicMock()
    container.shutdown = AsyncMock()
    container.set_bot = MagicMock()
    return container


# =============================================================================
# Bot Initialization Tests
# =============================================================================


class TestBotInitialization:
    """Tests for DjBot initialization."""

    @pytest.mark.asyncio
    async def test_init_sets_intents(self, mock_container, mock_settings):
        """Should enable the intents prefix commands and voice need."""
        bot = DjBot(container=mock_container, settings=mock_settings)

        assert bot.intents.message_content is True
        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True
        assert bot.intents.members is True

    @pytest.mark.asyncio
    async def test_init_sets_command_prefix(self, mock_container, mock_settings):
        """Should set command prefix from settings."""
        mock_settings.discord.command_prefix = "?"
        bot = DjBot(container=mock_container, settings=mock_settings)

        assert bot.command_prefix == "?"

    @pytest.mark.asyncio
    async def test_init_disables_default_help(self, mock_container, mock_settings):
        """Should leave !help to the music cog."""
        bot = DjBot(container=mock_container, settings=mock_settings)

        assert bot.help_command is None

    @pytest.mark.asyncio
    async def test_init_registers_with_container(self, mock_container, mock_settings):
        """Should hand itself to the container."""
        bot = DjBot(container=mock_container, settings=mock_settings)

        mock_container.set_bot.assert_called_once_with(bot)
        assert bot.container is mock_container
        assert bot.settings is mock_settings


# =============================================================================
# Setup / Ready / Close
# =============================================================================


class TestSetupHook:
    """Tests for DjBot.setup_hook."""

    @pytest.mark.asyncio
    async def test_setup_hook_loads_cogs(self, mock_container, mock_settings):
        """Should load every configured cog extension."""
        bot = DjBot(container=mock_container, settings=mock_settings)
        loop = asyncio.get_running_loop()
        previous_handler = loop.get_exception_handler()

        try:
            with patch.object(bot, "load_extension", new_callable=AsyncMock) as mock_load:
                await bot.setup_hook()
            assert loop.get_exception_handler() is _log_unhandled_async_error
        finally:
            loop.set_exception_handler(previous_handler)

        assert COGS == ("discord_dj_bot.infrastructure.discord.cogs.music_cog",)
        mock_load.assert_awaited_once_with(COGS[0])


class TestOnReady:
    """Tests for DjBot.on_ready."""

    @pytest.mark.asyncio
    async def test_on_ready_sets_presence(self, mock_container, mock_settings):
        """Should show the help command as listening activity."""
        bot = DjBot(container=mock_container, settings=mock_settings)
        bot._connection.user = MagicMock(id=123)

        with patch.object(bot, "change_presence", new_callable=AsyncMock) as mock_presence:
            await bot.on_ready()

        activity = mock_presence.await_args.kwargs["activity"]
        assert activity.type is discord.ActivityType.listening
        assert activity.name == "!help"


class TestBotClose:
    """Tests for DjBot.close."""

    @pytest.mark.asyncio
    async def test_close_shuts_down_container(self, mock_container, mock_settings):
        """Should shut down the container before closing the client."""
        bot = DjBot(container=mock_container, settings=mock_settings)

        await bot.close()

        mock_container.shutdown.assert_awaited_once()


class TestUnhandledAsyncErrors:
    """Tests for the loop exception handler."""

    def test_logs_exception(self, caplog):
        boom = RuntimeError("boom")

        with caplog.at_level(logging.ERROR):
            _log_unhandled_async_error(MagicMock(), {"message": "Task failed", "exception": boom})

        assert "Task failed" in caplog.text
        assert caplog.records[-1].exc_info[1] is boom


class TestCreateBot:
    """Tests for the create_bot factory."""

    @pytest.mark.asyncio
    async def test_create_bot(self, mock_container, mock_settings):
        bot = create_bot(mock_container, mock_settings)

        assert isinstance(bot, DjBot)
        assert bot.container is mock_container
