"""Discord voice transport: one voice client plus a FIFO track queue per guild."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Coroutine, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import discord

from yt_voice_bot.application.interfaces.voice_transport import (
    TrackEndHandler,
    VoiceConnection,
    VoiceTransport,
)
from yt_voice_bot.config.settings import AudioSettings
from yt_voice_bot.domain.shared.exceptions import (
    AudioResolveError,
    VoiceJoinError,
    VoiceLeaveError,
    VoiceTransportError,
)
from yt_voice_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from yt_voice_bot.domain.session.entities import AudioRequest
    from yt_voice_bot.infrastructure.audio.ytdlp_source import YtDlpSourceFactory

logger = logging.getLogger(__name__)

VoiceChannelLike = discord.VoiceChannel | discord.StageChannel


@dataclass
class _QueueEntry:
    request: AudioRequest
    started: bool = False
    playing: bool = False
    cancelled: bool = False


class DiscordVoiceConnection(VoiceConnection):
    """Track queue bound to a single guild's ``discord.VoiceClient``.

    The head entry is the one being resolved or played. Sources are
    resolved lazily when an entry reaches the head, so stream URLs are
    fresh when FFmpeg opens them.
    """

    def __init__(
        self,
        guild_id: int,
        voice_client: discord.VoiceClient,
        source_factory: YtDlpSourceFactory,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._guild_id = guild_id
        self._vc = voice_client
        self._factory = source_factory
        self._loop = loop or asyncio.get_running_loop()
        self._queue: deque[_QueueEntry] = deque()
        self._subscriptions: list[TrackEndHandler] = []
        self._play_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def voice_client(self) -> discord.VoiceClient:
        return self._vc

    def current_channel_id(self) -> int | None:
        vc = self._vc
        if not vc.is_connected() or vc.channel is None:
            return None
        return vc.channel.id

    async def enqueue(self, request: AudioRequest) -> None:
        self._queue.append(_QueueEntry(request))
        logger.info(LogTemplates.QUEUE_ENQUEUED, request, self._guild_id, len(self._queue))
        if not self._queue[0].started:
            self._spawn(self._start_next())

    def queue_len(self) -> int:
        return len(self._queue)

    def queue_skip(self) -> None:
        if not self._queue:
            return

        head = self._queue.popleft()
        logger.info(LogTemplates.QUEUE_SKIPPED, head.request, self._guild_id, len(self._queue))
        if head.playing:
            # The after-callback of the stopped source advances the queue.
            self._vc.stop()
            return

        head.cancelled = True
        self._spawn(self._advance(head))

    def queue_stop(self) -> None:
        dropped = len(self._queue)
        for entry in self._queue:
            entry.cancelled = True
        self._queue.clear()
        if self._vc.is_playing() or self._vc.is_paused():
            self._vc.stop()
        logger.info(LogTemplates.QUEUE_STOPPED, self._guild_id, dropped)

    def remove_event_subscriptions(self) -> None:
        self._subscriptions.clear()

    def add_track_end_subscription(self, handler: TrackEndHandler) -> None:
        self._subscriptions.append(handler)

    async def leave(self) -> None:
        try:
            await self._vc.disconnect(force=True)
        except Exception as e:
            raise VoiceLeaveError(self._guild_id, str(e)) from e
        logger.info(LogTemplates.VOICE_DISCONNECTED, self._guild_id)

    # ─────────────────────────────────────────────────────────────────
    # Playback
    # ─────────────────────────────────────────────────────────────────

    async def _start_next(self) -> None:
        async with self._play_lock:
            while self._queue:
                entry = self._queue[0]
                if entry.started:
                    return
                entry.started = True

                try:
                    source = await self._factory.create(entry.request)
                except AudioResolveError as e:
                    logger.warning(
                        LogTemplates.TRACK_SOURCE_FAILED, entry.request, self._guild_id, e.cause
                    )
                    self._drop_head(entry)
                    self._spawn(self._notify([entry.request]))
                    continue

                if entry.cancelled or not self._queue or self._queue[0] is not entry:
                    source.cleanup()
                    continue

                try:
                    self._vc.play(source, after=self._after_callback(entry))
                except discord.ClientException as e:
                    logger.warning(
                        LogTemplates.TRACK_SOURCE_FAILED, entry.request, self._guild_id, e
                    )
                    source.cleanup()
                    self._drop_head(entry)
                    self._spawn(self._notify([entry.request]))
                    continue

                entry.playing = True
                logger.info(LogTemplates.TRACK_STARTED, entry.request, self._guild_id)
                return

    def _after_callback(self, entry: _QueueEntry) -> Callable[[Exception | None], None]:
        def after(error: Exception | None = None) -> None:
            logger.info(LogTemplates.TRACK_ENDED, self._guild_id, error)
            asyncio.run_coroutine_threadsafe(self._handle_finished(entry), self._loop)

        return after

    async def _handle_finished(self, entry: _QueueEntry) -> None:
        """Called from the FFmpeg thread via run_coroutine_threadsafe."""
        entry.playing = False
        if entry.cancelled:
            return
        self._drop_head(entry)
        await self._advance(entry)

    async def _advance(self, ended: _QueueEntry) -> None:
        if self._queue and not self._queue[0].started:
            self._spawn(self._start_next())
        await self._notify([ended.request])

    async def _notify(self, ended: Sequence[AudioRequest]) -> None:
        for handler in list(self._subscriptions):
            try:
                await handler(ended)
            except Exception:
                logger.exception(LogTemplates.TRACK_END_HANDLER_ERROR, self._guild_id)

    def _drop_head(self, entry: _QueueEntry) -> None:
        if self._queue and self._queue[0] is entry:
            self._queue.popleft()

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


class DiscordVoiceTransport(VoiceTransport):
    def __init__(
        self,
        bot: discord.Client,
        *,
        source_factory: YtDlpSourceFactory,
        settings: AudioSettings | None = None,
    ) -> None:
        self._bot = bot
        self._factory = source_factory
        self._settings = settings or AudioSettings()
        self._connections: dict[int, DiscordVoiceConnection] = {}

    def _get_voice_client(self, guild: discord.Guild) -> discord.VoiceClient | None:
        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    async def join(self, guild_id: int, channel_id: int) -> VoiceConnection:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise VoiceJoinError(
                guild_id, channel_id, ErrorMessages.GUILD_NOT_FOUND.format(guild_id=guild_id)
            )

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, VoiceChannelLike):
            raise VoiceJoinError(
                guild_id, channel_id, ErrorMessages.CHANNEL_NOT_VOICE.format(channel_id=channel_id)
            )

        vc = self._get_voice_client(guild)
        try:
            async with asyncio.timeout(self._settings.connect_timeout_s):
                if vc is not None and vc.is_connected():
                    if vc.channel is None or vc.channel.id != channel_id:
                        await vc.move_to(channel)
                        await self._ensure_self_deaf(guild, channel)
                        logger.info(LogTemplates.VOICE_MOVED, channel_id, guild_id)
                else:
                    if vc is not None:
                        await vc.disconnect(force=True)
                    vc = await channel.connect(self_deaf=True)
                    logger.info(LogTemplates.VOICE_CONNECTED, channel_id, guild_id)
        except TimeoutError as e:
            cause = ErrorMessages.VOICE_CONNECT_TIMEOUT.format(channel_id=channel_id)
            logger.error(LogTemplates.VOICE_JOIN_FAILED, channel_id, guild_id, cause)
            raise VoiceJoinError(guild_id, channel_id, cause) from e
        except discord.Forbidden as e:
            cause = ErrorMessages.VOICE_NO_PERMISSION.format(channel_id=channel_id)
            logger.error(LogTemplates.VOICE_JOIN_FAILED, channel_id, guild_id, cause)
            raise VoiceJoinError(guild_id, channel_id, cause) from e
        except (discord.ClientException, discord.HTTPException) as e:
            logger.error(LogTemplates.VOICE_JOIN_FAILED, channel_id, guild_id, e)
            raise VoiceJoinError(guild_id, channel_id, str(e)) from e

        connection = self._connections.get(guild_id)
        if connection is None or connection.voice_client is not vc:
            if connection is not None:
                # Retire the queue bound to the dropped client.
                connection.queue_stop()
                connection.remove_event_subscriptions()
            connection = DiscordVoiceConnection(guild_id, vc, self._factory)
            self._connections[guild_id] = connection
        return connection

    async def _ensure_self_deaf(self, guild: discord.Guild, channel: VoiceChannelLike) -> None:
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except (discord.ClientException, discord.HTTPException) as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)

    def get(self, guild_id: int) -> VoiceConnection | None:
        return self._connections.get(guild_id)

    async def remove(self, guild_id: int) -> None:
        connection = self._connections.pop(guild_id, None)
        if connection is not None:
            connection.queue_stop()
            connection.remove_event_subscriptions()

        guild = self._bot.get_guild(guild_id)
        vc = self._get_voice_client(guild) if guild is not None else None
        if vc is None or not vc.is_connected():
            return

        try:
            await vc.disconnect(force=True)
        except Exception as e:
            raise VoiceTransportError(guild_id, str(e)) from e
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
