"""Encode result type and external tool resolution.

Tools are resolved from the configured path first (config file or
HLSLADDER_FFMPEG_PATH / HLSLADDER_FFPROBE_PATH), then from the system PATH.
"""

from __future__ import annotations

import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path

KNOWN_TOOLS = ("ffmpeg", "ffprobe")


class ToolNotAvailableError(RuntimeError):
    """Raised when a required external tool cannot be found."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(
            f"Required tool not available: {tool_name}. "
            "Install ffmpeg, or configure a custom path via "
            f"HLSLADDER_{tool_name.upper()}_PATH or ~/.hlsladder/config.toml"
        )


@dataclass(frozen=True)
class EncodeResult:
    """Result of a successful encode."""

    playlists: tuple[Path, ...]
    """Sub-playlists that were produced, in ladder order."""

    duration_seconds: float = 0.0
    """Wall-clock time spent in ffmpeg."""

    stderr_tail: list[str] = field(default_factory=list, compare=False)
    """Last lines of ffmpeg stderr, kept for logging."""


# Resolved tool paths, keyed by tool name (None = not found)
_resolved: dict[str, Path | None] = {}
_resolved_lock = threading.Lock()


def _resolve(tool_name: str) -> Path | None:
    from hlsladder.config import get_config

    configured = get_config().get_tool_path(tool_name)
    if configured is not None:
        configured = Path(configured).expanduser()
        if configured.is_file():
            return configured
        found = shutil.which(str(configured))
        return Path(found) if found else None

    found = shutil.which(tool_name)
    return Path(found) if found else None


def get_tool_path(tool_name: str) -> Path | None:
    """Get path to a tool, or None if not available.

    Args:
        tool_name: Name of the tool (ffmpeg, ffprobe).

    Returns:
        Path to the tool or None if not available.
    """
    with _resolved_lock:
        if tool_name not in _resolved:
            _resolved[tool_name] = _resolve(tool_name)
        return _resolved[tool_name]


def refresh_tool_paths() -> None:
    """Forget resolved tool paths (thread-safe).

    Call this if tool paths or availability may have changed.
    """
    with _resolved_lock:
        _resolved.clear()


def check_tool_availability() -> dict[str, bool]:
    """Check which external tools are available on the system.

    Returns:
        Dict mapping tool name to availability.
    """
    return {name: get_tool_path(name) is not None for name in KNOWN_TOOLS}


def require_tool(tool_name: str) -> Path:
    """Get path to a required tool, raising an error if not available.

    Args:
        tool_name: Name of the tool to find.

    Returns:
        Path to the tool executable.

    Raises:
        ToolNotAvailableError: If the tool is not available.
    """
    path = get_tool_path(tool_name)
    if path is None:
        raise ToolNotAvailableError(tool_name)
    return path
