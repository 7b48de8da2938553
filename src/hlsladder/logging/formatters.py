"""Log formatters for pipeline output.

Both formatters understand the fields a pipeline run attaches to its
records:

- ``asset_id`` / ``stage``: set by AssetContextFilter while an upload is
  being processed.
- ``error``: a PipelineError passed via ``extra`` (or found in exc_info).
- ``diagnostics``: raw ffprobe/ffmpeg stderr; only the last lines are kept.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from hlsladder.pipeline.exceptions import PipelineError

DIAGNOSTIC_TAIL_LINES = 10

# Attributes every LogRecord has, plus those added by formatting
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
}
_PIPELINE_ATTRS = frozenset({"asset_id", "stage", "error", "diagnostics"})


def _pipeline_error(record: logging.LogRecord) -> PipelineError | None:
    error = getattr(record, "error", None)
    if isinstance(error, PipelineError):
        return error
    if record.exc_info and isinstance(record.exc_info[1], PipelineError):
        return record.exc_info[1]
    return None


def diagnostic_lines(record: logging.LogRecord) -> list[str]:
    """Return the tail of the tool output attached to a record."""
    text = getattr(record, "diagnostics", None)
    if not text:
        error = _pipeline_error(record)
        text = error.diagnostics if error is not None else None
    if not text:
        return []
    lines = [line for line in str(text).splitlines() if line.strip()]
    return lines[-DIAGNOSTIC_TAIL_LINES:]


class PipelineTextFormatter(logging.Formatter):
    """Human-readable lines prefixed with ``[<asset_id>:<stage>]``.

    Tool diagnostics are appended below the message, indented.
    """

    default_format = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

    def __init__(self, fmt: str | None = None) -> None:
        super().__init__(fmt or self.default_format, datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        tag = self.asset_tag(record)
        if tag:
            line = f"{tag} {line}"

        error = _pipeline_error(record)
        if error is not None:
            line = f"{line} [{error.code}]"

        for diagnostic in diagnostic_lines(record):
            line = f"{line}\n    | {diagnostic}"
        return line

    @staticmethod
    def asset_tag(record: logging.LogRecord) -> str:
        asset_id = getattr(record, "asset_id", None)
        if not asset_id:
            return ""
        stage = getattr(record, "stage", None)
        return f"[{asset_id}:{stage}]" if stage else f"[{asset_id}]"


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Top-level keys: ``timestamp``, ``level``, ``logger``, ``message``; then
    ``asset_id``/``stage`` inside a pipeline run, ``error`` (code, stage)
    and ``diagnostics`` (list of lines) for pipeline failures, ``extra`` for
    any other fields passed by the caller, and ``exception`` for tracebacks.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in ("asset_id", "stage"):
            value = getattr(record, key, None)
            if value:
                entry[key] = value

        error = _pipeline_error(record)
        if error is not None:
            entry["error"] = {"code": error.code, "stage": error.stage}

        diagnostics = diagnostic_lines(record)
        if diagnostics:
            entry["diagnostics"] = diagnostics

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
            and key not in _PIPELINE_ATTRS
            and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
