"""TOML loading for the configuration file."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class TomlParseError(Exception):
    """Raised when a config file exists but is not valid TOML."""


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Load and parse a TOML file.

    Args:
        path: Path to the TOML file.
        strict: If True, raise TomlParseError on parse failures.
                If False (default), log and return an empty dict.

    Returns:
        Parsed dictionary. Empty dict if the file doesn't exist.

    Raises:
        TomlParseError: When strict=True and the file cannot be parsed.
    """
    if not path.exists():
        logger.debug("TOML file not found: %s", path)
        return {}

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        if strict:
            raise TomlParseError(f"Failed to parse {path}: {e}") from e
        logger.warning("Failed to parse config file %s: %s", path, e)
        return {}
