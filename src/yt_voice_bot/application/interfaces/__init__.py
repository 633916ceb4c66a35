"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from yt_voice_bot.application.interfaces.gateway import Gateway
from yt_voice_bot.application.interfaces.voice_transport import (
    TrackEndHandler,
    VoiceConnection,
    VoiceTransport,
)

__all__ = [
    "Gateway",
    "TrackEndHandler",
    "VoiceConnection",
    "VoiceTransport",
]
