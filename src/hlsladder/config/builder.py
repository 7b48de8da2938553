"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building HLSLadderConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from hlsladder.config.env import EnvReader
from hlsladder.config.models import (
    DEFAULT_DATA_DIR,
    EncodingConfig,
    HLSLadderConfig,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
    ToolPathsConfig,
)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Tool paths
    ffmpeg_path: Path | None = None
    ffprobe_path: Path | None = None

    # Storage
    output_root: Path | None = None
    upload_root: Path | None = None

    # Encoding
    max_concurrent_encodes: int | None = None
    segment_seconds: int | None = None
    video_encoder: str | None = None
    audio_codec: str | None = None
    audio_bitrate: str | None = None
    encode_timeout: float | None = None
    probe_timeout: float | None = None

    # Server
    server_bind: str | None = None
    server_port: int | None = None
    server_shutdown_timeout: float | None = None
    server_max_upload_bytes: int | None = None
    server_job_retention: float | None = None
    server_max_retained_jobs: int | None = None

    # Logging
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds HLSLadderConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self, data_dir: Path = DEFAULT_DATA_DIR) -> HLSLadderConfig:
        """Build the final HLSLadderConfig with defaults for unset values.

        Args:
            data_dir: Base directory for default storage locations.

        Returns:
            Complete HLSLadderConfig with all values resolved.

        Raises:
            ValueError: If a resolved value fails section validation.
        """
        tools = ToolPathsConfig(
            ffmpeg=self._get("ffmpeg_path", None),
            ffprobe=self._get("ffprobe_path", None),
        )

        storage = StorageConfig(
            output_root=self._get("output_root", data_dir / "hls"),
            upload_root=self._get("upload_root", data_dir / "uploads"),
        )

        encoding = EncodingConfig(
            max_concurrent_encodes=self._get("max_concurrent_encodes", 2),
            segment_seconds=self._get("segment_seconds", 10),
            video_encoder=self._get("video_encoder", "libx264"),
            audio_codec=self._get("audio_codec", "aac"),
            audio_bitrate=self._get("audio_bitrate", "128k"),
            encode_timeout=self._get("encode_timeout", None),
            probe_timeout=self._get("probe_timeout", 60.0),
        )

        server = ServerConfig(
            bind=self._get("server_bind", "127.0.0.1"),
            port=self._get("server_port", 3000),
            shutdown_timeout=self._get("server_shutdown_timeout", 30.0),
            max_upload_bytes=self._get("server_max_upload_bytes", 4 * 1024**3),
            job_retention=self._get("server_job_retention", 3600.0),
            max_retained_jobs=self._get("server_max_retained_jobs", 1000),
        )

        logging_config = LoggingConfig(
            level=self._get("logging_level", "info"),
            file=self._get("logging_file", None),
            format=self._get("logging_format", "text"),
            include_stderr=self._get("logging_include_stderr", False),
            max_bytes=self._get("logging_max_bytes", 10_485_760),
            backup_count=self._get("logging_backup_count", 5),
        )

        return HLSLadderConfig(
            tools=tools,
            storage=storage,
            encoding=encoding,
            logging=logging_config,
            server=server,
        )


def _optional_path(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from parsed TOML config file.

    Args:
        file_config: Parsed configuration dictionary from TOML file.

    Returns:
        ConfigSource with values from the config file.
    """
    tools = file_config.get("tools", {})
    storage = file_config.get("storage", {})
    encoding = file_config.get("encoding", {})
    server = file_config.get("server", {})
    logging_conf = file_config.get("logging", {})

    return ConfigSource(
        # Tool paths
        ffmpeg_path=_optional_path(tools.get("ffmpeg")),
        ffprobe_path=_optional_path(tools.get("ffprobe")),
        # Storage
        output_root=_optional_path(storage.get("output_root")),
        upload_root=_optional_path(storage.get("upload_root")),
        # Encoding
        max_concurrent_encodes=encoding.get("max_concurrent_encodes"),
        segment_seconds=encoding.get("segment_seconds"),
        video_encoder=encoding.get("video_encoder"),
        audio_codec=encoding.get("audio_codec"),
        audio_bitrate=encoding.get("audio_bitrate"),
        encode_timeout=encoding.get("encode_timeout"),
        probe_timeout=encoding.get("probe_timeout"),
        # Server
        server_bind=server.get("bind"),
        server_port=server.get("port"),
        server_shutdown_timeout=server.get("shutdown_timeout"),
        server_max_upload_bytes=server.get("max_upload_bytes"),
        server_job_retention=server.get("job_retention"),
        server_max_retained_jobs=server.get("max_retained_jobs"),
        # Logging
        logging_level=logging_conf.get("level"),
        logging_file=_optional_path(logging_conf.get("file")),
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from HLSLADDER_* environment variables.

    Args:
        reader: EnvReader instance for reading environment variables.

    Returns:
        ConfigSource with values from environment variables.
    """
    return ConfigSource(
        # Tool paths
        ffmpeg_path=reader.get_path("HLSLADDER_FFMPEG_PATH"),
        ffprobe_path=reader.get_path("HLSLADDER_FFPROBE_PATH"),
        # Storage
        output_root=reader.get_path("HLSLADDER_OUTPUT_ROOT"),
        upload_root=reader.get_path("HLSLADDER_UPLOAD_ROOT"),
        # Encoding
        max_concurrent_encodes=reader.get_int("HLSLADDER_MAX_CONCURRENT_ENCODES"),
        segment_seconds=reader.get_int("HLSLADDER_SEGMENT_SECONDS"),
        video_encoder=reader.get_str("HLSLADDER_VIDEO_ENCODER"),
        audio_codec=reader.get_str("HLSLADDER_AUDIO_CODEC"),
        audio_bitrate=reader.get_str("HLSLADDER_AUDIO_BITRATE"),
        encode_timeout=reader.get_float("HLSLADDER_ENCODE_TIMEOUT"),
        probe_timeout=reader.get_float("HLSLADDER_PROBE_TIMEOUT"),
        # Server (plain PORT is the fallback port variable)
        server_bind=reader.get_str("HLSLADDER_SERVER_BIND"),
        server_port=reader.get_int(
            "HLSLADDER_SERVER_PORT", reader.get_int("PORT")
        ),
        server_shutdown_timeout=reader.get_float("HLSLADDER_SERVER_SHUTDOWN_TIMEOUT"),
        server_max_upload_bytes=reader.get_int("HLSLADDER_MAX_UPLOAD_BYTES"),
        server_job_retention=reader.get_float("HLSLADDER_JOB_RETENTION"),
        server_max_retained_jobs=reader.get_int("HLSLADDER_MAX_RETAINED_JOBS"),
        # Logging
        logging_level=reader.get_str("HLSLADDER_LOG_LEVEL"),
        logging_file=reader.get_path("HLSLADDER_LOG_FILE"),
        logging_format=reader.get_str("HLSLADDER_LOG_FORMAT"),
    )
