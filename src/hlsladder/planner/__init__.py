"""Rendition planning against the fixed bitrate ladder."""

from hlsladder.planner.ladder import (
    ACCEPTED_AUDIO_CODECS,
    RENDITION_LADDER,
    get_profile,
)
from hlsladder.planner.planner import (
    plan,
    select_audio_track,
    select_feasible_renditions,
)

__all__ = [
    "ACCEPTED_AUDIO_CODECS",
    "RENDITION_LADDER",
    "get_profile",
    "plan",
    "select_audio_track",
    "select_feasible_renditions",
]
