"""API handlers for transcode jobs.

Endpoints:
    GET /api/jobs - List jobs known to this process
    GET /api/jobs/{job_id} - Get job status
    DELETE /api/jobs/{job_id} - Cancel a job
"""

from __future__ import annotations

from aiohttp import web

from hlsladder.pipeline.jobs import TranscodeService
from hlsladder.server.api.errors import NOT_FOUND, api_error


async def api_jobs_handler(request: web.Request) -> web.Response:
    """Handle GET /api/jobs."""
    service: TranscodeService = request.app["service"]
    jobs = [record.to_dict() for record in service.registry.list()]
    return web.json_response({"jobs": jobs, "total": len(jobs)})


async def api_job_detail_handler(request: web.Request) -> web.Response:
    """Handle GET /api/jobs/{job_id}.

    Returns:
        JSON job record, or 404 if the job is unknown.
    """
    service: TranscodeService = request.app["service"]
    job_id = request.match_info["job_id"]
    record = service.get(job_id)
    if record is None:
        return api_error(f"Job not found: {job_id}", code=NOT_FOUND, status=404)
    return web.json_response(record.to_dict())


async def api_job_cancel_handler(request: web.Request) -> web.Response:
    """Handle DELETE /api/jobs/{job_id}.

    Cancellation is asynchronous: the response reports the job as it is
    right now, and polling shows it reach ``cancelled``.
    """
    service: TranscodeService = request.app["service"]
    job_id = request.match_info["job_id"]
    record = service.cancel(job_id)
    if record is None:
        return api_error(f"Job not found: {job_id}", code=NOT_FOUND, status=404)
    return web.json_response(record.to_dict(), status=202)


def setup_job_routes(app: web.Application) -> None:
    """Register job API routes with the application.

    Args:
        app: aiohttp Application to configure.
    """
    app.router.add_get("/api/jobs", api_jobs_handler)
    app.router.add_get("/api/jobs/{job_id}", api_job_detail_handler)
    app.router.add_delete("/api/jobs/{job_id}", api_job_cancel_handler)
