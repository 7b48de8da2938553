"""Base class for ffmpeg-based executors.

Provides lazy tool path resolution and a process runner that reads
stderr on a background thread so that timeouts and cancellation can be
honoured while ffmpeg is still writing output.
"""

from __future__ import annotations

import logging
import queue
import subprocess  # nosec B404 - subprocess is required for ffmpeg invocation
import threading
import time
from abc import ABC
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from hlsladder.executor.interface import require_tool
from hlsladder.executor.progress import (
    EncodeProgress,
    parse_input_duration,
    parse_stderr_progress,
)

logger = logging.getLogger(__name__)


@dataclass
class FFmpegRun:
    """Outcome of one ffmpeg process."""

    returncode: int
    stderr_lines: list[str] = field(default_factory=list)
    timed_out: bool = False
    cancelled: bool = False
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out and not self.cancelled

    def stderr_tail(self, lines: int = 20) -> str:
        """Return the last lines of stderr as one string."""
        return "".join(self.stderr_lines[-lines:]).strip()


class FFmpegExecutorBase(ABC):
    """Base class for executors that use ffmpeg.

    Subclasses implement their own execute() method and use
    _run_ffmpeg() to run the process.
    """

    STDERR_DRAIN_TIMEOUT: float = 5.0  # Timeout for draining stderr after process ends
    POLL_INTERVAL: float = 0.5

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            ffmpeg_path: Explicit ffmpeg path. None resolves it on first use.
            timeout: Seconds before ffmpeg is killed. None = no limit.
        """
        self._tool_path = ffmpeg_path
        self._timeout = timeout

    @property
    def tool_path(self) -> Path:
        """Get path to ffmpeg, verifying availability.

        Raises:
            ToolNotAvailableError: If ffmpeg is not available.
        """
        if self._tool_path is None:
            self._tool_path = require_tool("ffmpeg")
        return self._tool_path

    def _run_ffmpeg(
        self,
        cmd: list[str],
        description: str,
        cancel_event: threading.Event | None = None,
        progress_callback: Callable[[EncodeProgress, float | None], None]
        | None = None,
    ) -> FFmpegRun:
        """Run an ffmpeg command with timeout, cancellation and progress.

        Args:
            cmd: ffmpeg command arguments.
            description: Description for logging.
            cancel_event: When set, the process is killed.
            progress_callback: Called with each progress update and the
                input duration in seconds (None until ffmpeg reports it).

        Returns:
            FFmpegRun. returncode is -1 when the process was killed.
        """
        process = subprocess.Popen(  # nosec B603 - argv list, no shell
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )

        stderr_output: list[str] = []
        stderr_queue: queue.Queue[str | None] = queue.Queue()
        stop_event = threading.Event()

        def read_stderr() -> None:
            try:
                assert process.stderr is not None
                for line in process.stderr:
                    if stop_event.is_set():
                        break
                    stderr_queue.put(line)
            except (ValueError, OSError) as e:
                # Pipe closed or process terminated
                logger.debug("Stderr reader stopped: %s", e)
            finally:
                stderr_queue.put(None)

        reader_thread = threading.Thread(target=read_stderr, daemon=True)
        reader_thread.start()

        timed_out = False
        cancelled = False
        duration: float | None = None
        start_time = time.monotonic()

        def handle_line(line: str) -> None:
            nonlocal duration
            stderr_output.append(line)
            if duration is None:
                duration = parse_input_duration(line)
            progress = parse_stderr_progress(line)
            if progress and progress_callback:
                try:
                    progress_callback(progress, duration)
                except Exception as e:
                    logger.warning("Progress callback error: %s", e)

        while True:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break

            if self._timeout is not None:
                if time.monotonic() - start_time >= self._timeout:
                    timed_out = True
                    break

            if process.poll() is not None:
                break

            try:
                line = stderr_queue.get(timeout=self.POLL_INTERVAL)
            except queue.Empty:
                continue
            if line is None:
                break
            handle_line(line)

        if timed_out or cancelled:
            if timed_out:
                logger.warning(
                    "%s timed out after %s seconds", description, self._timeout
                )
            else:
                logger.info("%s cancelled, stopping ffmpeg", description)
            stop_event.set()
            process.kill()
            process.wait()
            reader_thread.join(timeout=2.0)
            if reader_thread.is_alive():
                logger.error("Stderr reader thread failed to terminate after kill")
            return FFmpegRun(
                returncode=-1,
                stderr_lines=stderr_output,
                timed_out=timed_out,
                cancelled=cancelled,
                elapsed_seconds=time.monotonic() - start_time,
            )

        # Drain any remaining stderr output
        reader_thread.join(timeout=self.STDERR_DRAIN_TIMEOUT)
        while True:
            try:
                line = stderr_queue.get_nowait()
            except queue.Empty:
                break
            if line is None:
                break
            handle_line(line)

        process.wait()

        return FFmpegRun(
            returncode=process.returncode,
            stderr_lines=stderr_output,
            elapsed_seconds=time.monotonic() - start_time,
        )
