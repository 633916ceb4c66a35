"""Turn a requested URL into a playable discord.py audio source via yt-dlp and FFmpeg."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final, cast

import discord
from pydantic import BaseModel, ConfigDict, Field, field_validator
from yt_dlp import YoutubeDL

from yt_voice_bot.config.settings import AudioSettings
from yt_voice_bot.domain.session.entities import AudioRequest
from yt_voice_bot.domain.shared.exceptions import AudioResolveError
from yt_voice_bot.domain.shared.messages import ErrorMessages, LogTemplates
from yt_voice_bot.domain.shared.types import NonEmptyStr, PositiveInt

logger = logging.getLogger(__name__)

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10

# Matches yt-dlp's Android client user-agent to avoid YouTube 403 responses
ANDROID_USER_AGENT: Final[str] = "com.google.android.youtube/19.44.38 (Linux; U; Android 14) gzip"


class AudioFormatInfo(BaseModel):
    """A single format entry from yt-dlp extraction."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    acodec: NonEmptyStr | None = None


class YtDlpStreamInfo(BaseModel):
    """The parts of a yt-dlp info dict needed to stream a single video."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: NonEmptyStr | None = None
    title: NonEmptyStr = "Unknown Title"
    formats: list[AudioFormatInfo] = Field(default_factory=list)

    @field_validator("url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "Unknown Title"
        return v

    @property
    def stream_url(self) -> str | None:
        if self.url:
            return self.url
        audio_formats = [f for f in self.formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    forceipv4: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT
    format: NonEmptyStr | None = None
    skip_download: bool = True


class YtDlpSourceFactory:
    """Resolves a request lazily, right before its track starts playing."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._opts = YtDlpOpts(format=self._settings.ytdlp_format)

    def _extract_sync(self, url: str) -> YtDlpStreamInfo:
        logger.debug(LogTemplates.YTDLP_EXTRACTING, url)
        with YoutubeDL(params=cast(Any, self._opts.model_dump())) as ydl:
            data = ydl.extract_info(url, download=False)
        if not isinstance(data, dict):
            raise AudioResolveError(url, ErrorMessages.EMPTY_EXTRACTION)
        return YtDlpStreamInfo.model_validate(dict(data))

    async def resolve_stream_url(self, request: AudioRequest) -> str:
        try:
            info = await asyncio.to_thread(self._extract_sync, request.url)
        except AudioResolveError:
            raise
        except Exception as e:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT, request.url)
            raise AudioResolveError(request.url, str(e)) from e

        stream_url = info.stream_url
        if not stream_url:
            raise AudioResolveError(request.url, ErrorMessages.NO_STREAM_URL)
        return stream_url

    async def create(self, request: AudioRequest) -> discord.AudioSource:
        stream_url = await self.resolve_stream_url(request)

        ffmpeg_options = self._settings.ffmpeg_options
        before_opts = (
            f'{ffmpeg_options.get("before_options", "")} '
            f'-headers "User-Agent: {ANDROID_USER_AGENT}"'
        )
        source = discord.FFmpegPCMAudio(
            stream_url,
            before_options=before_opts,
            options=ffmpeg_options.get("options", ""),
        )
        return discord.PCMVolumeTransformer(source, volume=self._settings.default_volume)
