"""Encode executor: runs one EncodeJob and checks what it produced."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from hlsladder.config.models import EncodingConfig
from hlsladder.domain.models import EncodeJob
from hlsladder.executor.command import build_ffmpeg_command, prepare_output_dirs
from hlsladder.executor.ffmpeg_base import FFmpegExecutorBase
from hlsladder.executor.interface import EncodeResult
from hlsladder.executor.progress import EncodeProgress
from hlsladder.pipeline.exceptions import EncodeCancelled, EncodeFailure

logger = logging.getLogger(__name__)


class EncodeExecutor(FFmpegExecutorBase):
    """Runs the single fan-out ffmpeg process for an upload.

    There is no retry: a failed encode is terminal for its upload.
    """

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        encoding: EncodingConfig | None = None,
    ) -> None:
        self._encoding = encoding or EncodingConfig()
        super().__init__(ffmpeg_path=ffmpeg_path, timeout=self._encoding.encode_timeout)

    def execute(
        self,
        job: EncodeJob,
        cancel_event: threading.Event | None = None,
        progress_callback: Callable[[EncodeProgress, float | None], None]
        | None = None,
    ) -> EncodeResult:
        """Run the encode and validate its outputs.

        Args:
            job: The encode job.
            cancel_event: Optional cancellation hook; setting it kills ffmpeg.
            progress_callback: Optional progress listener.

        Returns:
            EncodeResult listing the produced sub-playlists.

        Raises:
            EncodeCancelled: If cancel_event was set.
            EncodeFailure: If ffmpeg fails, times out, or a playlist is
                missing or empty afterwards.
        """
        if cancel_event is not None and cancel_event.is_set():
            raise EncodeCancelled("Encode cancelled before start")

        prepare_output_dirs(job)
        cmd = build_ffmpeg_command(job, self.tool_path, self._encoding)

        labels = ", ".join(t.label for t in job.output_targets)
        logger.info("Starting encode: %s", labels)
        logger.debug("ffmpeg command: %s", " ".join(cmd))

        run = self._run_ffmpeg(
            cmd,
            description="HLS encode",
            cancel_event=cancel_event,
            progress_callback=progress_callback,
        )
        tail = run.stderr_tail()

        if run.cancelled:
            raise EncodeCancelled("Encode cancelled", diagnostics=tail or None)
        if run.timed_out:
            raise EncodeFailure(
                f"ffmpeg timed out after {self._timeout} seconds",
                diagnostics=tail or None,
            )
        if run.returncode != 0:
            logger.error(
                "ffmpeg exited with code %d", run.returncode, extra={"diagnostics": tail}
            )
            raise EncodeFailure(
                f"ffmpeg exited with code {run.returncode}",
                diagnostics=tail or None,
            )

        missing = [
            str(path)
            for path in job.expected_playlists
            if not path.is_file() or path.stat().st_size == 0
        ]
        if missing:
            raise EncodeFailure(
                "ffmpeg completed but playlist(s) are missing or empty: "
                + ", ".join(missing),
                diagnostics=tail or None,
            )

        logger.info("Encode finished in %.1fs", run.elapsed_seconds)
        return EncodeResult(
            playlists=tuple(job.expected_playlists),
            duration_seconds=run.elapsed_seconds,
            stderr_tail=run.stderr_lines[-20:],
        )
