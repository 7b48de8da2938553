"""Standardized API error response helper.

All error responses share one JSON shape:
- ``error``: Human-readable error message
- ``code``: Machine-readable error code string
- ``stage`` (optional): Pipeline stage that failed
- ``details`` (optional): Diagnostic text, e.g. the ffmpeg stderr tail

Usage:
    from hlsladder.server.api.errors import api_error, NOT_FOUND

    return api_error("Job not found", code=NOT_FOUND, status=404)
"""

from __future__ import annotations

from typing import Any

from aiohttp import web

from hlsladder.pipeline.exceptions import (
    EncodeCancelled,
    MissingUpload,
    NoCompatibleAudio,
    NoFeasibleRendition,
    PipelineError,
)

# --- Error code constants ---

INVALID_REQUEST = "INVALID_REQUEST"
NOT_FOUND = "NOT_FOUND"
MISSING_UPLOAD = MissingUpload.code
UPLOAD_TOO_LARGE = "UPLOAD_TOO_LARGE"
INTERNAL_ERROR = "INTERNAL_ERROR"
SHUTTING_DOWN = "SHUTTING_DOWN"

# Failures caused by the upload itself rather than by the server
_CLIENT_ERRORS = (MissingUpload, NoFeasibleRendition, NoCompatibleAudio)


def api_error(
    message: str,
    *,
    code: str,
    status: int = 400,
    stage: str | None = None,
    details: Any = None,
) -> web.Response:
    """Create a standardized JSON error response.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (use constants from this module).
        status: HTTP status code (default 400).
        stage: Pipeline stage that failed, if any.
        details: Optional additional context (string, list, or dict).

    Returns:
        aiohttp JSON response with ``{"error": ..., "code": ...}`` body.
    """
    body: dict[str, Any] = {"error": message, "code": code}
    if stage is not None:
        body["stage"] = stage
    if details is not None:
        body["details"] = details
    return web.json_response(body, status=status)


def status_for_error(error: PipelineError) -> int:
    """Map a pipeline failure to an HTTP status code."""
    if isinstance(error, _CLIENT_ERRORS):
        return 400
    if isinstance(error, EncodeCancelled):
        return 409
    return 500


def pipeline_error_response(error: PipelineError) -> web.Response:
    """Build the error response for a terminal pipeline failure."""
    return api_error(
        str(error),
        code=error.code,
        status=status_for_error(error),
        stage=error.stage,
        details=error.diagnostics,
    )
