"""Install root logging handlers from LoggingConfig."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from hlsladder.logging.context import AssetContextFilter
from hlsladder.logging.formatters import JSONFormatter, PipelineTextFormatter

if TYPE_CHECKING:
    from hlsladder.config.models import LoggingConfig


def make_formatter(log_format: str) -> logging.Formatter:
    """Return the formatter for a LoggingConfig.format value."""
    if log_format.casefold() == "json":
        return JSONFormatter()
    return PipelineTextFormatter()


def _open_log_file(config: LoggingConfig) -> logging.Handler | None:
    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        # Logging is not configured yet, so report straight to stderr
        sys.stderr.write(f"Warning: Could not open log file {path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> list[logging.Handler]:
    """Replace the root logger's handlers according to config.

    A rotating file handler is used when ``config.file`` is set and can be
    opened; stderr is used otherwise, or in addition when
    ``include_stderr`` is set. Every handler carries the asset context
    filter so pipeline records are tagged with their asset and stage.

    Returns:
        The handlers that were installed.
    """
    handlers: list[logging.Handler] = []
    if config.file:
        file_handler = _open_log_file(config)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    level = logging.getLevelName(config.level.upper())
    formatter = make_formatter(config.format)
    context_filter = AssetContextFilter()

    root_logger = logging.getLogger()
    for old in root_logger.handlers[:]:
        root_logger.removeHandler(old)
    root_logger.setLevel(level)

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)
    return handlers
