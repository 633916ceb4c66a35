"""Session Orchestrator - decides join vs. enqueue and teardown vs. continue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.session.entities import VoiceSession
from ...domain.shared.events import SessionCreated, SessionDestroyed, get_event_bus
from ...domain.shared.exceptions import VoiceLeaveError, VoiceTransportError
from ...domain.shared.messages import LogTemplates
from ..commands.clear_queue import ClearResult
from ..commands.play_track import PlayResult, PlayTrackCommand
from ..commands.skip_track import SkipResult
from .track_end_watcher import TrackCompletionWatcher

if TYPE_CHECKING:
    from ...domain.session.registry import SessionRegistry
    from ..interfaces.gateway import Gateway
    from ..interfaces.voice_transport import VoiceConnection, VoiceTransport

logger = logging.getLogger(__name__)


class SessionOrchestrator:
    """Sole writer of the session registry.

    Every public method takes the guild's lock from the registry and holds it
    for the whole read-decide-act sequence, including awaited joins and
    disconnects. Domain events are published after the lock is released.
    """

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        transport: VoiceTransport,
        gateway: Gateway,
    ) -> None:
        self._registry = registry
        self._transport = transport
        self._gateway = gateway
        self._bus = get_event_bus()

    # ─────────────────────────────────────────────────────────────────
    # Command surface
    # ─────────────────────────────────────────────────────────────────

    async def join_or_enqueue(self, command: PlayTrackCommand) -> PlayResult:
        guild_id = command.guild_id
        target = command.requester_channel_id
        if target is None:
            logger.debug(LogTemplates.SESSION_NO_VOICE_CHANNEL, guild_id)
            return PlayResult.no_voice_channel()

        async with self._registry.lock(guild_id):
            session = self._registry.get(guild_id)
            if session is not None and session.channel_id == target and session.is_connected:
                queue_len = await session.enqueue(command.request)
                waiting = max(queue_len - 1, 0)
                logger.info(LogTemplates.SESSION_ENQUEUED, guild_id, waiting)
                return PlayResult.enqueued(target, waiting)

            try:
                connection = await self._transport.join(guild_id, target)
            except VoiceTransportError as e:
                logger.error(LogTemplates.VOICE_JOIN_FAILED, target, guild_id, e.message)
                return PlayResult.join_failed(target, e.message)

            if session is not None:
                logger.info(LogTemplates.SESSION_REJOIN, guild_id, session.channel_id, target)

            session = self._start_session(connection, command)
            await session.enqueue(command.request)

        await self._bus.publish(SessionCreated(guild_id=guild_id, channel_id=target))
        return PlayResult.joined(target)

    async def skip(self, guild_id: int) -> SkipResult:
        async with self._registry.lock(guild_id):
            session = self._registry.get(guild_id)
            if session is None:
                return SkipResult.not_active()
            remaining = session.skip()
        return SkipResult.skipped(remaining)

    async def clear(self, guild_id: int) -> ClearResult:
        async with self._registry.lock(guild_id):
            session = self._registry.get(guild_id)
            if session is None:
                return ClearResult.not_active()
            session.clear()
        return ClearResult.cleared()

    # ─────────────────────────────────────────────────────────────────
    # Teardown decisions
    # ─────────────────────────────────────────────────────────────────

    async def handle_tracks_ended(self, guild_id: int) -> bool:
        """Tear down if nothing is left to play and the connection is still up."""
        async with self._registry.lock(guild_id):
            session = self._registry.get(guild_id)
            if session is None:
                return False

            connection = self._transport.get(guild_id)
            if connection is None or connection.queue_len() > 0:
                return False
            if connection.current_channel_id() is None:
                return False

            logger.info(LogTemplates.SESSION_QUEUE_EMPTY, guild_id)
            reason = "queue exhausted"
            destroyed = await self._teardown_locked(guild_id, reason)

        await self._announce_teardown(guild_id, reason, destroyed)
        return destroyed

    async def handle_presence_change(self, guild_id: int) -> bool:
        """Tear down if the joined channel has no humans left or the registry is out of sync."""
        async with self._registry.lock(guild_id):
            session = self._registry.get(guild_id)
            connection = self._transport.get(guild_id)

            if session is None and connection is None:
                return False

            if session is None:
                logger.info(LogTemplates.SESSION_ORPHANED_CONNECTION, guild_id)
                reason = "orphaned connection"
            elif connection is None or connection.current_channel_id() is None:
                logger.info(LogTemplates.SESSION_CONNECTION_GONE, guild_id)
                reason = "connection lost"
            elif self._gateway.channel_occupants(guild_id, session.channel_id):
                return False
            else:
                logger.info(LogTemplates.SESSION_CHANNEL_EMPTY, session.channel_id, guild_id)
                reason = "channel vacated"

            destroyed = await self._teardown_locked(guild_id, reason)

        await self._announce_teardown(guild_id, reason, destroyed)
        return destroyed

    async def teardown(self, guild_id: int, reason: str = "requested") -> bool:
        """Stop, unsubscribe, disconnect, and unregister. Safe to call repeatedly."""
        async with self._registry.lock(guild_id):
            destroyed = await self._teardown_locked(guild_id, reason)
        await self._announce_teardown(guild_id, reason, destroyed)
        return destroyed

    # ─────────────────────────────────────────────────────────────────
    # Internals (caller holds the guild lock)
    # ─────────────────────────────────────────────────────────────────

    def _start_session(self, connection: VoiceConnection, command: PlayTrackCommand) -> VoiceSession:
        # A joined connection may be one re-pointed from another channel.
        connection.queue_stop()
        connection.remove_event_subscriptions()
        connection.add_track_end_subscription(
            TrackCompletionWatcher(
                guild_id=command.guild_id,
                notify_channel_id=command.notify_channel_id,
                gateway=self._gateway,
                orchestrator=self,
            )
        )

        session = VoiceSession(
            guild_id=command.guild_id,
            channel_id=command.requester_channel_id,
            notify_channel_id=command.notify_channel_id,
            connection=connection,
        )
        self._registry.put(session)
        logger.info(
            LogTemplates.SESSION_JOINED,
            session.channel_id,
            session.guild_id,
            session.notify_channel_id,
        )
        return session

    async def _teardown_locked(self, guild_id: int, reason: str) -> bool:
        session = self._registry.get(guild_id)
        connection = self._transport.get(guild_id)

        if session is None and connection is None:
            logger.debug(LogTemplates.SESSION_NOTHING_TO_TEAR_DOWN, guild_id)
            return False

        if connection is not None:
            connection.queue_stop()
            connection.remove_event_subscriptions()

            try:
                await connection.leave()
            except VoiceLeaveError as e:
                logger.warning(LogTemplates.VOICE_LEAVE_FAILED, guild_id, e.cause)

            try:
                await self._transport.remove(guild_id)
            except VoiceTransportError as e:
                logger.warning(LogTemplates.VOICE_REMOVE_FAILED, guild_id, e.message)

        self._registry.pop(guild_id)
        logger.info(LogTemplates.SESSION_TORN_DOWN, guild_id, reason)
        return True

    async def _announce_teardown(self, guild_id: int, reason: str, destroyed: bool) -> None:
        if destroyed:
            await self._bus.publish(SessionDestroyed(guild_id=guild_id, reason=reason))
