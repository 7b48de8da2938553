"""Configuration management for hlsladder.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (HLSLADDER_*)
3. Config file (~/.hlsladder/config.toml)
4. Default values (lowest priority)
"""

from hlsladder.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from hlsladder.config.env import EnvReader
from hlsladder.config.loader import (
    clear_config_cache,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from hlsladder.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from hlsladder.config.models import (
    EncodingConfig,
    HLSLadderConfig,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
    ToolPathsConfig,
)
from hlsladder.config.toml_parser import TomlParseError, load_toml_file

__all__ = [
    # Models
    "EncodingConfig",
    "HLSLadderConfig",
    "LoggingConfig",
    "ServerConfig",
    "StorageConfig",
    "ToolPathsConfig",
    # Loader
    "clear_config_cache",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "load_config_file",
    # Builder
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
    # Logging
    "build_logging_config",
    "configure_logging_from_cli",
    # TOML
    "TomlParseError",
    "load_toml_file",
]
