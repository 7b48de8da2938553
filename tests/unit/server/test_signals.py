"""Unit tests for signal handler setup."""

import asyncio
import os
import signal
from unittest.mock import MagicMock

from hlsladder.server.lifecycle import ServerLifecycle
from hlsladder.server.signals import remove_signal_handlers, setup_signal_handlers


class TestSignalSetup:
    """Tests for signal handler registration."""

    def test_sigterm_triggers_shutdown(self) -> None:
        """A delivered SIGTERM should start shutdown and set the event."""

        async def _test() -> ServerLifecycle:
            loop = asyncio.get_running_loop()
            lifecycle = ServerLifecycle(shutdown_timeout=1.0)
            shutdown_event = asyncio.Event()
            setup_signal_handlers(loop, lifecycle, shutdown_event)
            try:
                os.kill(os.getpid(), signal.SIGTERM)
                await asyncio.wait_for(shutdown_event.wait(), timeout=2.0)
            finally:
                remove_signal_handlers(loop)
            return lifecycle

        lifecycle = asyncio.run(_test())
        assert lifecycle.is_shutting_down

    def test_registration_failure_is_logged(self, caplog) -> None:
        """Loops without signal support should only produce warnings."""
        loop = MagicMock()
        loop.add_signal_handler.side_effect = NotImplementedError

        setup_signal_handlers(loop, ServerLifecycle(), asyncio.Event())

        assert loop.add_signal_handler.call_count == 2
        assert "Failed to register handler" in caplog.text

    def test_remove_tolerates_missing_handlers(self) -> None:
        """Removing handlers that were never added should not raise."""
        loop = MagicMock()
        loop.remove_signal_handler.side_effect = RuntimeError
        remove_signal_handlers(loop)
        assert loop.remove_signal_handler.call_count == 2
