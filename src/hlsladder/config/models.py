"""Configuration data models.

This module defines dataclasses for hlsladder configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATA_DIR = Path.home() / ".hlsladder"


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class StorageConfig:
    """Where uploads are staged and HLS assets are published."""

    output_root: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "hls")
    """Root directory holding one subdirectory per published asset."""

    upload_root: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "uploads")
    """Directory where incoming upload files are saved before transcoding."""


@dataclass
class EncodingConfig:
    """Encoder settings shared by every rendition."""

    # Upper bound on ffmpeg processes running at the same time
    max_concurrent_encodes: int = 2

    # HLS target segment duration in seconds
    segment_seconds: int = 10

    video_encoder: str = "libx264"
    audio_codec: str = "aac"
    audio_bitrate: str = "128k"

    # Seconds before an ffmpeg run is killed (None = no limit)
    encode_timeout: float | None = None

    # Seconds before an ffprobe run is killed
    probe_timeout: float = 60.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_concurrent_encodes < 1:
            raise ValueError(
                "max_concurrent_encodes must be at least 1, "
                f"got {self.max_concurrent_encodes}"
            )
        if self.segment_seconds < 1:
            raise ValueError(
                f"segment_seconds must be positive, got {self.segment_seconds}"
            )
        if self.encode_timeout is not None and self.encode_timeout <= 0:
            raise ValueError(
                f"encode_timeout must be positive, got {self.encode_timeout}"
            )
        if self.probe_timeout <= 0:
            raise ValueError(f"probe_timeout must be positive, got {self.probe_timeout}")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class ServerConfig:
    """Configuration for the upload/playback HTTP server."""

    bind: str = "127.0.0.1"
    """Network address to bind to. Default localhost."""

    port: int = 3000
    """Port number for the HTTP server."""

    shutdown_timeout: float = 30.0
    """Seconds to wait for graceful shutdown before cancelling tasks."""

    max_upload_bytes: int = 4 * 1024**3
    """Largest accepted upload body in bytes."""

    job_retention: float = 3600.0
    """Seconds a finished job stays queryable under /api/jobs."""

    max_retained_jobs: int = 1000
    """Most finished jobs kept in memory; the oldest are dropped first."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if self.shutdown_timeout <= 0:
            raise ValueError(
                f"shutdown_timeout must be positive, got {self.shutdown_timeout}"
            )
        if self.max_upload_bytes <= 0:
            raise ValueError(
                f"max_upload_bytes must be positive, got {self.max_upload_bytes}"
            )
        if self.job_retention < 0:
            raise ValueError(
                f"job_retention must not be negative, got {self.job_retention}"
            )
        if self.max_retained_jobs < 0:
            raise ValueError(
                f"max_retained_jobs must not be negative, got {self.max_retained_jobs}"
            )


@dataclass
class HLSLadderConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def get_tool_path(self, tool_name: str) -> Path | None:
        """Get configured path for a tool.

        Args:
            tool_name: Name of the tool (ffmpeg, ffprobe).

        Returns:
            Configured path or None if not configured.
        """
        return getattr(self.tools, tool_name.lower(), None)
