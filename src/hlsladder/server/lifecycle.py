"""Server lifecycle management.

Tracks startup time and graceful shutdown state for the HTTP server.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone


@dataclass
class ShutdownState:
    """Tracks shutdown progress for graceful termination."""

    initiated: datetime | None = None
    """UTC timestamp when shutdown was initiated, None if not shutting down."""

    timeout_deadline: datetime | None = None
    """UTC timestamp after which remaining jobs are abandoned."""

    @property
    def is_shutting_down(self) -> bool:
        return self.initiated is not None

    @property
    def is_timed_out(self) -> bool:
        """Returns True if shutdown timeout has been exceeded."""
        if self.timeout_deadline is None:
            return False
        return datetime.now(timezone.utc) >= self.timeout_deadline

    @property
    def seconds_remaining(self) -> float:
        """Seconds left before the deadline (0.0 when not shutting down)."""
        if self.timeout_deadline is None:
            return 0.0
        remaining = self.timeout_deadline - datetime.now(timezone.utc)
        return max(0.0, remaining.total_seconds())


@dataclass
class ServerLifecycle:
    """Manages server startup and shutdown state.

    Once shutdown starts, new uploads are refused and in-flight jobs are
    given until the deadline to stop.
    """

    shutdown_timeout: float = 30.0
    """Seconds to wait for jobs to stop during shutdown."""

    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    shutdown_state: ShutdownState = field(default_factory=ShutdownState)

    @property
    def uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self.start_time).total_seconds()

    @property
    def is_shutting_down(self) -> bool:
        return self.shutdown_state.is_shutting_down

    def initiate_shutdown(self) -> None:
        """Begin graceful shutdown.

        Idempotent: calling it again has no further effect.
        """
        if self.shutdown_state.initiated is not None:
            return

        now = datetime.now(timezone.utc)
        self.shutdown_state.initiated = now
        self.shutdown_state.timeout_deadline = now + timedelta(
            seconds=self.shutdown_timeout
        )
