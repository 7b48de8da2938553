"""JSON API route modules for the hlsladder server.

- uploads.py: upload intake and asset listing
- jobs.py: job status and cancellation
"""

from aiohttp import web

from hlsladder.server.api.jobs import setup_job_routes
from hlsladder.server.api.uploads import setup_upload_routes

__all__ = [
    "setup_api_routes",
]


def setup_api_routes(app: web.Application) -> None:
    """Register every API route with the application."""
    setup_upload_routes(app)
    setup_job_routes(app)
