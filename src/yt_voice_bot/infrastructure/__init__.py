"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice and gateway adapters)
- Audio (yt-dlp extraction and FFmpeg sources)
"""

from yt_voice_bot.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
]
