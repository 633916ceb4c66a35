"""Discord gateway adapter: text-channel messaging and voice-state cache lookups."""

from __future__ import annotations

import logging

import discord

from yt_voice_bot.application.interfaces.gateway import Gateway
from yt_voice_bot.domain.shared.exceptions import MessageSendError
from yt_voice_bot.domain.shared.messages import ErrorMessages, LogTemplates
from yt_voice_bot.utils.reply import DISCORD_MESSAGE_LIMIT, truncate

logger = logging.getLogger(__name__)


class DiscordGateway(Gateway):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot

    async def _resolve_messageable(self, channel_id: int) -> discord.abc.Messageable:
        channel = self._bot.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self._bot.fetch_channel(channel_id)
            except (discord.NotFound, discord.Forbidden) as e:
                raise MessageSendError(channel_id, str(e)) from e
        if not isinstance(channel, discord.abc.Messageable):
            raise MessageSendError(channel_id, ErrorMessages.TEXT_CHANNEL_NOT_FOUND)
        return channel

    async def post(self, channel_id: int, text: str) -> None:
        channel = await self._resolve_messageable(channel_id)
        try:
            await channel.send(truncate(text, DISCORD_MESSAGE_LIMIT))
        except discord.HTTPException as e:
            logger.warning(LogTemplates.MESSAGE_SEND_FAILED, e)
            raise MessageSendError(channel_id, str(e)) from e

    def channel_occupants(self, guild_id: int, channel_id: int) -> list[int]:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            return []

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            return []

        me = self._bot.user.id if self._bot.user is not None else None
        occupants: list[int] = []
        for user_id in channel.voice_states:
            if user_id == me:
                continue
            member = guild.get_member(user_id)
            if member is not None and member.bot:
                continue
            occupants.append(user_id)
        return occupants
