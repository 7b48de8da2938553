"""API handlers for uploads and asset listing.

Endpoints:
    POST /upload - Accept a multipart video upload and start a transcode
    GET /videos - List asset directories under the output root
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from aiohttp import BodyPartReader, web

from hlsladder.pipeline.exceptions import MissingUpload
from hlsladder.pipeline.jobs import JobStatus, TranscodeService
from hlsladder.server.api.errors import (
    SHUTTING_DOWN,
    UPLOAD_TOO_LARGE,
    api_error,
    pipeline_error_response,
)

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "video"
_TRUTHY = frozenset({"1", "true", "yes"})


class UploadTooLarge(Exception):
    """Raised when an upload exceeds the configured size limit."""


async def save_part(part: BodyPartReader, destination: Path, max_bytes: int) -> int:
    """Stream a multipart part to disk without blocking the event loop.

    Returns:
        Number of bytes written.

    Raises:
        UploadTooLarge: If more than max_bytes arrive. The partial file is
            removed.
    """
    written = 0
    f = await asyncio.to_thread(destination.open, "wb")
    try:
        while chunk := await part.read_chunk():
            written += len(chunk)
            if written > max_bytes:
                raise UploadTooLarge(f"Upload exceeds {max_bytes} bytes")
            await asyncio.to_thread(f.write, chunk)
    except BaseException:
        await asyncio.to_thread(f.close)
        destination.unlink(missing_ok=True)
        raise
    await asyncio.to_thread(f.close)
    return written


def playback_url(asset_id: str) -> str:
    return f"/hls/{asset_id}/master.m3u8"


async def upload_handler(request: web.Request) -> web.Response:
    """Handle POST /upload.

    Expects multipart form data with the file in the ``video`` field.

    Query parameters:
        wait: When truthy, respond only after the transcode finishes.

    Returns:
        202 with the job id, or with ``wait`` 201 with the published asset.
        400 when no file was supplied.
    """
    service: TranscodeService = request.app["service"]
    lifecycle = request.app.get("lifecycle")
    if lifecycle is not None and lifecycle.is_shutting_down:
        return api_error(
            "Server is shutting down", code=SHUTTING_DOWN, status=503
        )

    if not request.content_type.startswith("multipart/"):
        return pipeline_error_response(MissingUpload("No video file uploaded."))

    max_bytes: int = request.app["max_upload_bytes"]
    reader = await request.multipart()

    staged: Path | None = None
    original_name = ""
    while True:
        part = await reader.next()
        if part is None:
            break
        if not isinstance(part, BodyPartReader) or part.name != UPLOAD_FIELD:
            continue
        if not part.filename:
            continue

        original_name = part.filename
        staged = service.store.stage_upload(original_name)
        try:
            size = await save_part(part, staged, max_bytes)
        except UploadTooLarge as e:
            return api_error(str(e), code=UPLOAD_TOO_LARGE, status=413)
        logger.info("Received upload %s (%d bytes)", original_name, size)
        break

    if staged is None:
        return pipeline_error_response(MissingUpload("No video file uploaded."))

    record = service.submit(staged, original_name)

    if request.query.get("wait", "").casefold() not in _TRUTHY:
        return web.json_response(
            {
                "job_id": record.job_id,
                "asset_id": record.asset_id,
                "status": record.status.value,
                "status_url": f"/api/jobs/{record.job_id}",
            },
            status=202,
        )

    record = await service.wait(record.job_id)
    if record.status == JobStatus.SUCCEEDED and record.result is not None:
        return web.json_response(
            {
                "asset_id": record.asset_id,
                "renditions": record.result.renditions,
                "master_playlist": f"{record.asset_id}/master.m3u8",
                "playback_url": playback_url(record.asset_id),
            },
            status=201,
        )
    assert record.error is not None
    return pipeline_error_response(record.error)


async def videos_handler(request: web.Request) -> web.Response:
    """Handle GET /videos - list asset directories.

    Returns:
        JSON ``{"videos": [...ids], "assets": [{"id", "published"}]}``.
    """
    service: TranscodeService = request.app["service"]
    entries = await asyncio.to_thread(service.store.list_assets)
    return web.json_response(
        {
            "videos": [entry.asset_id for entry in entries],
            "assets": [entry.to_dict() for entry in entries],
        }
    )


def setup_upload_routes(app: web.Application) -> None:
    """Register upload and listing routes with the application."""
    app.router.add_post("/upload", upload_handler)
    app.router.add_get("/videos", videos_handler)
