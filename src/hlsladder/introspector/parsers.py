"""Pure parsers for ffprobe output.

These functions never run a process, so they can be exercised directly
with captured ffprobe output.
"""

from __future__ import annotations

import json
import re

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from hlsladder.domain.models import AudioTrack
from hlsladder.pipeline.exceptions import ProbeFailure

_GEOMETRY_PATTERN = re.compile(r"^\s*(\d+)x(\d+)\s*$")


class FFprobeAudioStreamModel(BaseModel):
    """One entry of the ffprobe ``streams`` array for an audio stream."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    index: int
    codec_type: str = "audio"
    codec_name: str = ""

    @field_validator("codec_name", "codec_type")
    @classmethod
    def casefold_name(cls, v: str) -> str:
        """Normalise codec names for comparison."""
        return v.casefold()


class FFprobeAudioOutputModel(BaseModel):
    """Top-level ffprobe JSON document for the audio query."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    streams: list[FFprobeAudioStreamModel] = []


def parse_geometry(output: str) -> tuple[int, int]:
    """Parse the ``<width>x<height>`` line printed for the first video stream.

    Args:
        output: Raw ffprobe stdout.

    Returns:
        Tuple of (width, height).

    Raises:
        ProbeFailure: If the output is empty, malformed, or non-positive.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        raise ProbeFailure("ffprobe reported no video stream", diagnostics=output)

    # Some containers print a trailing separator ("1920x1080x")
    first = lines[0].strip().rstrip("x")
    match = _GEOMETRY_PATTERN.match(first)
    if match is None:
        raise ProbeFailure(
            f"Unrecognised video geometry: {first!r}", diagnostics=output
        )

    width, height = int(match.group(1)), int(match.group(2))
    if width <= 0 or height <= 0:
        raise ProbeFailure(
            f"Invalid video geometry: {width}x{height}", diagnostics=output
        )
    return width, height


def parse_audio_streams(output: str) -> tuple[AudioTrack, ...]:
    """Parse ffprobe JSON output listing the audio streams.

    Streams are returned in the order ffprobe enumerated them. Entries
    whose codec_type is not "audio" are skipped.

    Args:
        output: Raw ffprobe stdout (``-of json``).

    Returns:
        Tuple of AudioTrack, possibly empty.

    Raises:
        ProbeFailure: If the output is not JSON or does not match the
            expected shape.
    """
    if not output.strip():
        return ()

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ProbeFailure(
            f"Invalid ffprobe JSON output: {e}", diagnostics=output
        ) from e

    try:
        model = FFprobeAudioOutputModel.model_validate(data)
    except ValidationError as e:
        raise ProbeFailure(
            f"Unexpected ffprobe output structure: {e.error_count()} error(s)",
            diagnostics=str(e),
        ) from e

    return tuple(
        AudioTrack(stream_index=stream.index, codec=stream.codec_name)
        for stream in model.streams
        if stream.codec_type == "audio"
    )
