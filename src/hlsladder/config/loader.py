"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (HLSLADDER_*)
3. Config file (~/.hlsladder/config.toml)
4. Default values

Environment variables:
- HLSLADDER_CONFIG_PATH: Path to config file (overrides default location)
- HLSLADDER_DATA_DIR: Base data directory (overrides ~/.hlsladder/)
- HLSLADDER_FFMPEG_PATH / HLSLADDER_FFPROBE_PATH: Tool paths
- HLSLADDER_OUTPUT_ROOT / HLSLADDER_UPLOAD_ROOT: Storage locations
- HLSLADDER_MAX_CONCURRENT_ENCODES: Bound on parallel ffmpeg runs
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from hlsladder.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from hlsladder.config.env import EnvReader
from hlsladder.config.models import DEFAULT_DATA_DIR, HLSLadderConfig
from hlsladder.config.toml_parser import load_toml_file

logger = logging.getLogger(__name__)

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


def get_data_dir() -> Path:
    """Get the base data directory (~/.hlsladder/ by default).

    Can be overridden by HLSLADDER_DATA_DIR environment variable.
    """
    env_path = os.environ.get("HLSLADDER_DATA_DIR")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_DATA_DIR


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by HLSLADDER_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("HLSLADDER_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return get_data_dir() / "config.toml"


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation, so an edited file is
    picked up on the next call.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise TomlParseError on parse failures.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        if path in _config_cache:
            cached_config, cached_mtime = _config_cache[path]
            if current_mtime == cached_mtime:
                return cached_config

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    output_root: Path | None = None,
    max_concurrent_encodes: int | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> HLSLadderConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides HLSLADDER_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.
        output_root: CLI override for the published asset root.
        max_concurrent_encodes: CLI override for the encode bound.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise TomlParseError on config file parse failures.

    Returns:
        HLSLadderConfig with merged configuration.

    Raises:
        TomlParseError: When strict=True and the config file cannot be parsed.
        ValueError: When a merged value is out of range.
    """
    reader = env_reader or EnvReader()

    file_config = load_config_file(config_path, strict=strict)

    cli_source = ConfigSource(
        ffmpeg_path=ffmpeg_path,
        ffprobe_path=ffprobe_path,
        output_root=output_root,
        max_concurrent_encodes=max_concurrent_encodes,
    )

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config))
    builder.apply(source_from_env(reader))
    builder.apply(cli_source)

    data_dir = reader.get_path("HLSLADDER_DATA_DIR", DEFAULT_DATA_DIR)
    return builder.build(data_dir=data_dir)
