"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the session registry, the voice and gateway
adapters, and the orchestration services built on them. Components are
created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.gateway import Gateway
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.presence_watcher import PresenceWatcher
    from ..application.services.session_event_logger import SessionEventLogger
    from ..application.services.session_orchestrator import SessionOrchestrator
    from ..domain.session.registry import SessionRegistry
    from ..infrastructure.audio.ytdlp_source import YtDlpSourceFactory
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None
    _session_event_logger: SessionEventLogger | None = None

    # Domain state
    _session_registry: SessionRegistry | None = None

    # Infrastructure adapters
    _source_factory: YtDlpSourceFactory | None = None
    _voice_transport: VoiceTransport | None = None
    _gateway: Gateway | None = None

    # Application services
    _session_orchestrator: SessionOrchestrator | None = None

    # Cross-cutting event subscribers
    _presence_watcher: PresenceWatcher | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Domain State ===

    @property
    def session_registry(self) -> SessionRegistry:
        """Get the process-wide session registry."""
        if self._session_registry is None:
            from ..domain.session.registry import SessionRegistry

            self._session_registry = SessionRegistry()
        return self._session_registry

    # === Infrastructure Adapters ===

    @property
    def source_factory(self) -> YtDlpSourceFactory:
        """Get the yt-dlp audio source factory."""
        if self._source_factory is None:
            from ..infrastructure.audio.ytdlp_source import YtDlpSourceFactory

            self._source_factory = YtDlpSourceFactory(self.settings.audio)
        return self._source_factory

    @property
    def voice_transport(self) -> VoiceTransport:
        """Get the voice transport."""
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import (
                DiscordVoiceTransport,
            )

            self._voice_transport = DiscordVoiceTransport(
                self.bot,
                source_factory=self.source_factory,
                settings=self.settings.audio,
            )
        return self._voice_transport

    @property
    def gateway(self) -> Gateway:
        """Get the gateway adapter."""
        if self._gateway is None:
            from ..infrastructure.discord.adapters.gateway import DiscordGateway

            self._gateway = DiscordGateway(self.bot)
        return self._gateway

    # === Application Services ===

    @property
    def session_orchestrator(self) -> SessionOrchestrator:
        """Get the session orchestrator."""
        if self._session_orchestrator is None:
            from ..application.services.session_orchestrator import SessionOrchestrator

            self._session_orchestrator = SessionOrchestrator(
                registry=self.session_registry,
                transport=self.voice_transport,
                gateway=self.gateway,
            )
        return self._session_orchestrator

    # === Event Subscribers ===

    @property
    def presence_watcher(self) -> PresenceWatcher:
        """Get the voice presence watcher."""
        if self._presence_watcher is None:
            from ..application.services.presence_watcher import PresenceWatcher

            self._presence_watcher = PresenceWatcher(orchestrator=self.session_orchestrator)
        return self._presence_watcher

    @property
    def session_event_logger(self) -> SessionEventLogger:
        """Get the session lifecycle logger."""
        if self._session_event_logger is None:
            from ..application.services.session_event_logger import SessionEventLogger

            self._session_event_logger = SessionEventLogger()
        return self._session_event_logger

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Start cross-cutting subscribers."""
        self.presence_watcher.start()
        self.session_event_logger.start()

    async def shutdown(self) -> None:
        """Stop subscribers. Live voice sessions are left to close with the gateway."""
        try:
            if self._presence_watcher is not None:
                self._presence_watcher.stop()
        except Exception as exc:
            logger.warning("Failed stopping presence watcher: %r", exc)
        try:
            if self._session_event_logger is not None:
                self._session_event_logger.stop()
        except Exception as exc:
            logger.warning("Failed stopping session event logger: %r", exc)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
