"""
Application Commands

Command objects and the results the orchestrator returns for them.
"""

from yt_voice_bot.application.commands.clear_queue import ClearResult, ClearStatus
from yt_voice_bot.application.commands.play_track import PlayResult, PlayStatus, PlayTrackCommand
from yt_voice_bot.application.commands.skip_track import SkipResult, SkipStatus

__all__ = [
    # Play
    "PlayTrackCommand",
    "PlayResult",
    "PlayStatus",
    # Skip
    "SkipResult",
    "SkipStatus",
    # Clear
    "ClearResult",
    "ClearStatus",
]
