"""Environment variable reader with dependency injection support.

This module provides the EnvReader class for reading and parsing environment
variables with type conversion. Tests inject a plain dict instead of
touching os.environ.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)


class EnvReader:
    """Environment variable reader with type conversion.

    Example:
        reader = EnvReader(env={"HLSLADDER_SERVER_PORT": "9000"})
        port = reader.get_int("HLSLADDER_SERVER_PORT", 3000)  # 9000
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        """Initialize the environment reader.

        Args:
            env: Optional mapping to use instead of os.environ.
        """
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        value = self._env.get(var)
        if value is None:
            return default
        return value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Get an integer, logging a warning and using default if invalid."""
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid integer value for %s: %s", var, value)
            return default

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Get a float, logging a warning and using default if invalid."""
        value = self._env.get(var)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning("Invalid float value for %s: %s", var, value)
            return default

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Get a boolean.

        "true", "1", "yes" and "on" (any case) are true; any other
        value is false.
        """
        value = self._env.get(var)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def get_path(self, var: str, default: Path | None = None) -> Path | None:
        """Get a path with tilde expansion."""
        value = self._env.get(var)
        if value is None or not value.strip():
            return default
        return Path(value).expanduser()
