"""Discord cogs - command handlers."""

from yt_voice_bot.infrastructure.discord.cogs.event_cog import EventCog
from yt_voice_bot.infrastructure.discord.cogs.music_cog import MusicCog

__all__ = [
    "MusicCog",
    "EventCog",
]
