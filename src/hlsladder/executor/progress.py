"""ffmpeg stderr progress parsing.

ffmpeg reports progress on stderr as lines like::

    frame= 1234 fps= 30 q=28.0 size=N/A time=00:01:23.45 bitrate=N/A speed=2.0x

and announces the input length once, before encoding starts::

    Duration: 00:02:10.04, start: 0.000000, bitrate: 5012 kb/s
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_FRAME_PATTERN = re.compile(r"frame=\s*(\d+)")
_FPS_PATTERN = re.compile(r"fps=\s*([\d.]+)")
_SPEED_PATTERN = re.compile(r"speed=\s*([^\s]+)")
_TIME_PATTERN = re.compile(r"time=\s*(\d+):(\d+):(\d+)\.(\d+)")
_DURATION_PATTERN = re.compile(r"Duration:\s*(\d+):(\d+):(\d+)\.(\d+)")


@dataclass
class EncodeProgress:
    """Parsed ffmpeg progress line."""

    frame: int | None = None
    fps: float | None = None
    out_time_us: int | None = None  # Output time in microseconds
    speed: str | None = None

    @property
    def out_time_seconds(self) -> float | None:
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None

    def get_percent(self, duration_seconds: float | None) -> float:
        """Calculate progress percentage based on duration.

        Args:
            duration_seconds: Total duration of the source in seconds.

        Returns:
            Progress percentage (0.0 to 100.0), or 0.0 if unknown.
        """
        if duration_seconds is None or duration_seconds <= 0:
            return 0.0
        out_time = self.out_time_seconds
        if out_time is None:
            return 0.0
        return min(100.0, (out_time / duration_seconds) * 100)


def _clock_to_us(match: re.Match[str]) -> int:
    hours, minutes, seconds = (int(match.group(i)) for i in (1, 2, 3))
    # Fractional part is printed as centiseconds
    fraction = match.group(4)[:2].ljust(2, "0")
    return (hours * 3600 + minutes * 60 + seconds) * 1_000_000 + int(fraction) * 10_000


def parse_stderr_progress(line: str) -> EncodeProgress | None:
    """Parse an ffmpeg stderr progress line.

    Args:
        line: A line from ffmpeg stderr.

    Returns:
        Parsed EncodeProgress or None if not a progress line.
    """
    if "frame=" not in line:
        return None

    result = EncodeProgress()

    match = _FRAME_PATTERN.search(line)
    if match:
        result.frame = int(match.group(1))

    match = _FPS_PATTERN.search(line)
    if match:
        try:
            result.fps = float(match.group(1))
        except ValueError:
            result.fps = None

    match = _SPEED_PATTERN.search(line)
    if match and match.group(1) != "N/A":
        result.speed = match.group(1)

    match = _TIME_PATTERN.search(line)
    if match:
        result.out_time_us = _clock_to_us(match)

    return result


def parse_input_duration(line: str) -> float | None:
    """Return the input duration in seconds from a ``Duration:`` line."""
    match = _DURATION_PATTERN.search(line)
    if match is None:
        return None
    return _clock_to_us(match) / 1_000_000
