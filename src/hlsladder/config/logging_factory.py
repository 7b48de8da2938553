"""Apply command-line logging options on top of the configured ones."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from hlsladder.config.models import LoggingConfig

logger = logging.getLogger(__name__)


def build_logging_config(
    base: LoggingConfig,
    *,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Return a copy of base with every non-None override applied.

    Raises:
        ValueError: If an override fails LoggingConfig validation.
    """
    overrides = {
        "level": level,
        "file": file,
        "format": format,
        "include_stderr": include_stderr,
    }
    return replace(base, **{k: v for k, v in overrides.items() if v is not None})


def configure_logging_from_cli(
    *,
    config_path: Path | None = None,
    level: str | None = None,
    file: Path | None = None,
    format: str | None = None,
    include_stderr: bool | None = None,
) -> LoggingConfig:
    """Configure root logging for a CLI command and return the settings used."""
    from hlsladder.config import get_config
    from hlsladder.logging import configure_logging

    settings = build_logging_config(
        get_config(config_path=config_path).logging,
        level=level,
        file=file,
        format=format,
        include_stderr=include_stderr,
    )
    handlers = configure_logging(settings)
    logger.debug(
        "Logging at %s in %s format to %d handler(s)",
        settings.level,
        settings.format,
        len(handlers),
        extra={"log_file": str(settings.file) if settings.file else None},
    )
    return settings
