"""
Unit Tests for the track-end and presence watchers

Tests for:
- TrackCompletionWatcher posting the ended-track count and asking for a teardown check
- TrackCompletionWatcher surviving send failures
- PresenceWatcher subscribing to VoiceStateChanged and forwarding the guild
- PresenceWatcher start/stop idempotency
- SessionEventLogger recording session start and end at info level
"""

import logging
from unittest.mock import AsyncMock

from conftest import CHANNEL_A, GUILD_ID, TEXT_CHANNEL, USER_ID
from yt_voice_bot.application.services.presence_watcher import PresenceWatcher
from yt_voice_bot.application.services.session_event_logger import SessionEventLogger
from yt_voice_bot.application.services.track_end_watcher import TrackCompletionWatcher
from yt_voice_bot.domain.session.entities import AudioRequest
from yt_voice_bot.domain.shared.events import (
    SessionCreated,
    SessionDestroyed,
    VoiceStateChanged,
    get_event_bus,
)


class TestTrackCompletionWatcher:
    async def test_posts_count_then_checks_teardown(self, gateway):
        orchestrator = AsyncMock()
        watcher = TrackCompletionWatcher(
            guild_id=GUILD_ID,
            notify_channel_id=TEXT_CHANNEL,
            gateway=gateway,
            orchestrator=orchestrator,
        )

        await watcher([AudioRequest(url="https://youtu.be/a"), AudioRequest(url="https://youtu.be/b")])

        assert gateway.posts == [(TEXT_CHANNEL, "Tracks ended: 2.")]
        orchestrator.handle_tracks_ended.assert_awaited_once_with(GUILD_ID)

    async def test_send_failure_is_logged(self, gateway, caplog):
        gateway.fail_posts = True
        orchestrator = AsyncMock()
        watcher = TrackCompletionWatcher(
            guild_id=GUILD_ID,
            notify_channel_id=TEXT_CHANNEL,
            gateway=gateway,
            orchestrator=orchestrator,
        )

        await watcher([AudioRequest(url="https://youtu.be/a")])

        assert "Missing Access" in caplog.text
        orchestrator.handle_tracks_ended.assert_awaited_once_with(GUILD_ID)


class TestPresenceWatcher:
    async def test_forwards_voice_state_changes(self):
        orchestrator = AsyncMock()
        watcher = PresenceWatcher(orchestrator=orchestrator)
        watcher.start()

        await get_event_bus().publish(
            VoiceStateChanged(guild_id=GUILD_ID, user_id=USER_ID, before_channel_id=CHANNEL_A)
        )

        orchestrator.handle_presence_change.assert_awaited_once_with(GUILD_ID)

    async def test_stop_unsubscribes(self):
        orchestrator = AsyncMock()
        watcher = PresenceWatcher(orchestrator=orchestrator)
        watcher.start()
        watcher.stop()

        await get_event_bus().publish(VoiceStateChanged(guild_id=GUILD_ID, user_id=USER_ID))

        orchestrator.handle_presence_change.assert_not_awaited()
        assert watcher.started is False

    async def test_start_twice_subscribes_once(self):
        orchestrator = AsyncMock()
        watcher = PresenceWatcher(orchestrator=orchestrator)
        watcher.start()
        watcher.start()

        await get_event_bus().publish(VoiceStateChanged(guild_id=GUILD_ID, user_id=USER_ID))

        assert orchestrator.handle_presence_change.await_count == 1

    async def test_handler_error_is_contained(self, caplog):
        """A failing teardown check is logged by the bus, not raised to the publisher."""
        orchestrator = AsyncMock()
        orchestrator.handle_presence_change.side_effect = RuntimeError("boom")
        PresenceWatcher(orchestrator=orchestrator).start()

        await get_event_bus().publish(VoiceStateChanged(guild_id=GUILD_ID, user_id=USER_ID))

        assert "boom" in caplog.text


class TestSessionEventLogger:
    async def test_logs_session_start(self, caplog):
        SessionEventLogger().start()

        with caplog.at_level(logging.INFO):
            await get_event_bus().publish(SessionCreated(guild_id=GUILD_ID, channel_id=CHANNEL_A))

        assert f"Session started in guild {GUILD_ID} on channel {CHANNEL_A}" in caplog.text

    async def test_logs_session_end_with_reason(self, caplog):
        SessionEventLogger().start()

        with caplog.at_level(logging.INFO):
            await get_event_bus().publish(
                SessionDestroyed(guild_id=GUILD_ID, reason="channel vacated")
            )

        assert f"Session ended in guild {GUILD_ID} (channel vacated)" in caplog.text

    async def test_stop_unsubscribes(self, caplog):
        event_logger = SessionEventLogger()
        event_logger.start()
        event_logger.stop()

        with caplog.at_level(logging.INFO):
            await get_event_bus().publish(SessionCreated(guild_id=GUILD_ID, channel_id=CHANNEL_A))

        assert "Session started" not in caplog.text
        assert event_logger.started is False

    async def test_start_twice_logs_once(self, caplog):
        event_logger = SessionEventLogger()
        event_logger.start()
        event_logger.start()

        with caplog.at_level(logging.INFO):
            await get_event_bus().publish(SessionDestroyed(guild_id=GUILD_ID, reason="requested"))

        assert caplog.text.count("Session ended") == 1
