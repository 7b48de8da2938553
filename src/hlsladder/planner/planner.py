"""Rendition planning.

Given what the inspector found, decide which ladder renditions the source
can feed and which audio stream they carry. Planning is pure: it touches
neither the filesystem nor any external tool, and it always runs before an
encode is started.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from hlsladder.domain.models import (
    AudioTrack,
    FeasiblePlan,
    InputDescriptor,
    RenditionProfile,
)
from hlsladder.pipeline.exceptions import NoCompatibleAudio, NoFeasibleRendition
from hlsladder.planner.ladder import ACCEPTED_AUDIO_CODECS, RENDITION_LADDER

logger = logging.getLogger(__name__)


def select_feasible_renditions(
    width: int,
    height: int,
    ladder: Sequence[RenditionProfile] = RENDITION_LADDER,
) -> tuple[RenditionProfile, ...]:
    """Return ladder entries that fit within the source, in ladder order.

    A rendition is feasible when both of its dimensions are no larger than
    the source's. Sources are never upscaled.
    """
    return tuple(p for p in ladder if p.width <= width and p.height <= height)


def select_audio_track(tracks: Iterable[AudioTrack]) -> AudioTrack | None:
    """Return the first track with an accepted codec, or None.

    This is first match in enumeration order, not best match.
    """
    for track in tracks:
        if track.codec.casefold() in ACCEPTED_AUDIO_CODECS:
            return track
    return None


def plan(
    descriptor: InputDescriptor,
    output_root: Path,
    ladder: Sequence[RenditionProfile] = RENDITION_LADDER,
) -> FeasiblePlan:
    """Build the FeasiblePlan for one source.

    Args:
        descriptor: Result of inspecting the source.
        output_root: Asset root directory the renditions will be written to.
        ladder: Bitrate ladder, highest first.

    Returns:
        FeasiblePlan with at least one rendition.

    Raises:
        NoFeasibleRendition: If the source is smaller than every rendition.
        NoCompatibleAudio: If no audio stream is AAC or MP3.
    """
    renditions = select_feasible_renditions(descriptor.width, descriptor.height, ladder)
    if not renditions:
        raise NoFeasibleRendition(descriptor.width, descriptor.height)

    audio = select_audio_track(descriptor.audio_tracks)
    if audio is None:
        raise NoCompatibleAudio([t.codec for t in descriptor.audio_tracks])

    logger.info(
        "Planned %d rendition(s) for %s: %s (audio stream %d, %s)",
        len(renditions),
        descriptor.resolution,
        ", ".join(r.label for r in renditions),
        audio.stream_index,
        audio.codec,
    )
    return FeasiblePlan(
        source_path=descriptor.path,
        renditions=renditions,
        selected_audio=audio,
        output_root=output_root,
    )
