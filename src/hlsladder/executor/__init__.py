"""Encode plan building and execution with ffmpeg."""

from hlsladder.executor.command import (
    build_encode_job,
    build_ffmpeg_command,
    build_filter_graph,
    prepare_output_dirs,
)
from hlsladder.executor.encoder import EncodeExecutor
from hlsladder.executor.interface import (
    EncodeResult,
    ToolNotAvailableError,
    check_tool_availability,
    get_tool_path,
    require_tool,
)
from hlsladder.executor.progress import EncodeProgress, parse_stderr_progress

__all__ = [
    "EncodeExecutor",
    "EncodeProgress",
    "EncodeResult",
    "ToolNotAvailableError",
    "build_encode_job",
    "build_ffmpeg_command",
    "build_filter_graph",
    "check_tool_availability",
    "get_tool_path",
    "parse_stderr_progress",
    "prepare_output_dirs",
    "require_tool",
]
