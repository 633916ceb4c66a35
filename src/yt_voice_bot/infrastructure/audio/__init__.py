"""Audio infrastructure - yt-dlp extraction feeding FFmpeg sources."""

from yt_voice_bot.infrastructure.audio.ytdlp_source import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpSourceFactory,
    YtDlpStreamInfo,
)

__all__ = [
    "AudioFormatInfo",
    "YtDlpOpts",
    "YtDlpSourceFactory",
    "YtDlpStreamInfo",
]
