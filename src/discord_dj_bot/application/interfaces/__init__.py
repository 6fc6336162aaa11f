"""Port interfaces for infrastructure adapters."""

from discord_dj_bot.application.interfaces.audio_resolver import AudioResolver
from discord_dj_bot.application.interfaces.notifier import Notifier
from discord_dj_bot.application.interfaces.stream_provider import AudioStream, StreamProvider
from discord_dj_bot.application.interfaces.voice_adapter import (
    AudioPlayer,
    PlayerListener,
    VoiceConnection,
    VoiceGateway,
)

__all__ = [
    "AudioPlayer",
    "AudioResolver",
    "AudioStream",
    "Notifier",
    "PlayerListener",
    "StreamProvider",
    "VoiceConnection",
    "VoiceGateway",
]
