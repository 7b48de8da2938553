"""ffprobe-based implementation of the MediaInspector protocol."""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from hlsladder.core.subprocess_utils import run_command
from hlsladder.domain.models import InputDescriptor
from hlsladder.introspector.parsers import parse_audio_streams, parse_geometry
from hlsladder.pipeline.exceptions import MissingUpload, ProbeFailure

logger = logging.getLogger(__name__)


class FFprobeInspector:
    """ffprobe-based implementation of MediaInspector protocol.

    Runs two ffprobe queries per file: the geometry of the first video
    stream and the list of audio streams. Both are read-only.
    """

    def __init__(self, ffprobe_path: Path | None = None, timeout: float = 60.0) -> None:
        """Initialize the inspector.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. If not provided,
                uses the configured path or the system PATH.
            timeout: Seconds allowed for each ffprobe run.

        Raises:
            ToolNotAvailableError: If ffprobe is not available.
        """
        if ffprobe_path is None:
            from hlsladder.executor.interface import require_tool

            ffprobe_path = require_tool("ffprobe")
        self._ffprobe_path = ffprobe_path
        self._timeout = timeout

    def geometry_command(self, path: Path) -> list[str]:
        """Build the argv reporting ``<w>x<h>`` of the first video stream."""
        return [
            str(self._ffprobe_path),
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height",
            "-of",
            "csv=p=0:s=x",
            str(path),
        ]

    def audio_command(self, path: Path) -> list[str]:
        """Build the argv listing audio streams as JSON."""
        return [
            str(self._ffprobe_path),
            "-v",
            "error",
            "-select_streams",
            "a",
            "-show_entries",
            "stream=index,codec_type,codec_name",
            "-of",
            "json",
            str(path),
        ]

    def inspect(self, path: Path) -> InputDescriptor:
        """Inspect a source video.

        Args:
            path: Path to the uploaded video.

        Returns:
            InputDescriptor with geometry and audio tracks.

        Raises:
            MissingUpload: If the file does not exist.
            ProbeFailure: If ffprobe fails or its output is unusable.
        """
        if not path.exists():
            raise MissingUpload(f"Source file not found: {path}")

        width, height = parse_geometry(self._run(self.geometry_command(path), path))
        audio_tracks = parse_audio_streams(self._run(self.audio_command(path), path))

        logger.info(
            "Inspected %s: %dx%d, %d audio stream(s)",
            path.name,
            width,
            height,
            len(audio_tracks),
            extra={"audio_codecs": [t.codec for t in audio_tracks]},
        )
        return InputDescriptor(
            path=path, width=width, height=height, audio_tracks=audio_tracks
        )

    def _run(self, args: list[str], path: Path) -> str:
        try:
            stdout, stderr, returncode = run_command(args, timeout=self._timeout)
        except subprocess.TimeoutExpired as e:
            raise ProbeFailure(
                f"ffprobe timed out for {path} after {e.timeout}s"
            ) from e
        except FileNotFoundError as e:
            raise ProbeFailure(f"ffprobe not found at {self._ffprobe_path}") from e

        if returncode != 0:
            logger.warning(
                "ffprobe exited with code %d for %s", returncode, path.name
            )
            raise ProbeFailure(
                f"ffprobe failed for {path} (exit code {returncode})",
                diagnostics=stderr.strip() or None,
            )
        return stdout
