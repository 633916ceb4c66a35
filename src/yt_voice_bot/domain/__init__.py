# ruff: noqa: N999
"""
Domain Layer

Contains pure state and rules organized by bounded contexts:
- shared/: Cross-cutting types, exceptions, messages, and the event bus
- session/: Voice sessions and the session registry
"""

from yt_voice_bot.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
