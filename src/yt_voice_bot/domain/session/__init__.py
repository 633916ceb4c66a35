"""
Voice Session Bounded Context

Per-guild voice sessions and the registry that tracks which guilds have one.
"""

from yt_voice_bot.domain.session.entities import AudioRequest, VoiceSession
from yt_voice_bot.domain.session.registry import SessionRegistry

__all__ = [
    "AudioRequest",
    "VoiceSession",
    "SessionRegistry",
]
