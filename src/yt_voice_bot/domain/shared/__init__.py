"""
Shared Domain Kernel

Contains exceptions, validated types, and messages shared across the bot.
"""

from yt_voice_bot.domain.shared.exceptions import (
    AudioResolveError,
    DomainError,
    MessageSendError,
    VoiceJoinError,
    VoiceLeaveError,
    VoiceTransportError,
)

__all__ = [
    "AudioResolveError",
    "DomainError",
    "MessageSendError",
    "VoiceJoinError",
    "VoiceLeaveError",
    "VoiceTransportError",
]
