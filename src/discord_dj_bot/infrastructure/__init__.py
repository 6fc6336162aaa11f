"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Memory (guild queue store)
- Audio (yt-dlp metadata resolver, yt-dlp byte-stream subprocess)
- Discord (bot, cogs, voice gateway, notifier)
"""
