"""HTTP application for upload, job tracking and HLS playback.

The handlers are thin: uploads are staged to disk and handed to the
TranscodeService, which runs each pipeline on a worker thread. Published
assets are served as static files from the output root.
"""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import asdict, dataclass

from aiohttp import web

from hlsladder import __version__
from hlsladder.config.models import ServerConfig
from hlsladder.pipeline.jobs import JobStatus, TranscodeService
from hlsladder.server.api import setup_api_routes

logger = logging.getLogger(__name__)

# HLS media types are missing from some platform mime tables
mimetypes.add_type("application/vnd.apple.mpegurl", ".m3u8")
mimetypes.add_type("video/mp2t", ".ts")


@dataclass
class HealthStatus:
    """Health check response payload."""

    status: str
    """Overall status: 'healthy' or 'unhealthy'."""

    uptime_seconds: float
    version: str
    shutting_down: bool = False
    jobs_queued: int = 0
    jobs_running: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


async def _shutdown_service(app: web.Application) -> None:
    """Cancel in-flight jobs when the application shuts down."""
    service: TranscodeService = app["service"]
    lifecycle = app.get("lifecycle")
    timeout = (
        lifecycle.shutdown_timeout
        if lifecycle is not None
        else app["server_config"].shutdown_timeout
    )
    await service.shutdown(timeout)


def create_app(
    service: TranscodeService,
    server_config: ServerConfig | None = None,
) -> web.Application:
    """Create and configure the aiohttp Application.

    Args:
        service: Transcode service that owns the pipeline and asset store.
        server_config: Server settings; defaults are used when None.

    Returns:
        Configured aiohttp Application instance.
    """
    server_config = server_config or ServerConfig()

    app = web.Application(client_max_size=server_config.max_upload_bytes)
    app["service"] = service
    app["server_config"] = server_config
    app["max_upload_bytes"] = server_config.max_upload_bytes
    app["lifecycle"] = None  # Will be set by serve command

    app.router.add_get("/health", health_handler)
    setup_api_routes(app)

    output_root = service.store.output_root
    output_root.mkdir(parents=True, exist_ok=True)
    app.router.add_static("/hls", output_root, name="hls", show_index=True)

    app.on_shutdown.append(_shutdown_service)

    logger.debug("Serving HLS assets from %s", output_root)
    return app


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /health requests.

    Returns:
        200 with HealthStatus while running, 503 once shutdown has started.
    """
    service: TranscodeService = request.app["service"]
    lifecycle = request.app.get("lifecycle")

    shutting_down = lifecycle.is_shutting_down if lifecycle else False
    uptime = lifecycle.uptime_seconds if lifecycle else 0.0

    records = service.registry.list()
    health = HealthStatus(
        status="unhealthy" if shutting_down else "healthy",
        uptime_seconds=round(uptime, 1),
        version=__version__,
        shutting_down=shutting_down,
        jobs_queued=sum(1 for r in records if r.status == JobStatus.QUEUED),
        jobs_running=sum(1 for r in records if r.status == JobStatus.RUNNING),
    )
    return web.json_response(
        health.to_dict(), status=503 if shutting_down else 200
    )
