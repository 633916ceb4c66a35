"""Base exception classes for domain-level and collaborator errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class VoiceTransportError(DomainError):
    """Raised when the voice transport cannot complete a connection change."""

    def __init__(self, guild_id: int, message: str, code: str | None = None) -> None:
        super().__init__(message, code=code or "VOICE_TRANSPORT_ERROR")
        self.guild_id = guild_id


class VoiceJoinError(VoiceTransportError):
    """Raised when joining a voice channel fails (permission, timeout, client error)."""

    def __init__(self, guild_id: int, channel_id: int, cause: str) -> None:
        super().__init__(guild_id, cause, code="VOICE_JOIN_FAILED")
        self.channel_id = channel_id
        self.cause = cause


class VoiceLeaveError(VoiceTransportError):
    """Raised when disconnecting from a voice channel fails."""

    def __init__(self, guild_id: int, cause: str) -> None:
        super().__init__(guild_id, cause, code="VOICE_LEAVE_FAILED")
        self.cause = cause


class MessageSendError(DomainError):
    """Raised when a status message cannot be delivered to a text channel."""

    def __init__(self, channel_id: int, cause: str) -> None:
        super().__init__(f"Failed to send a message to {channel_id}: {cause}", code="SEND_FAILED")
        self.channel_id = channel_id
        self.cause = cause


class AudioResolveError(DomainError):
    """Raised when a URL cannot be turned into a playable audio source."""

    def __init__(self, url: str, cause: str) -> None:
        super().__init__(f"Could not resolve {url}: {cause}", code="AUDIO_RESOLVE_FAILED")
        self.url = url
        self.cause = cause
