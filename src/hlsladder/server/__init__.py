"""HTTP server: upload intake, job status, asset listing and HLS playback.

Exports:
    ServerLifecycle: Manages server startup/shutdown state
    ShutdownState: Tracks shutdown progress for graceful termination
    HealthStatus: Response payload for health check endpoint
    create_app: Factory function to create the aiohttp Application
"""

from hlsladder.server.app import HealthStatus, create_app
from hlsladder.server.lifecycle import ServerLifecycle, ShutdownState

__all__ = [
    "ServerLifecycle",
    "ShutdownState",
    "HealthStatus",
    "create_app",
]
