"""CLI serve command.

Runs the upload/playback HTTP server until SIGTERM or SIGINT.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from hlsladder.cli.exit_codes import ExitCode
from hlsladder.config import get_config

if TYPE_CHECKING:
    from hlsladder.config.models import HLSLadderConfig

logger = logging.getLogger(__name__)


def _configure_server_logging(
    log_level: str | None,
    log_format: str | None,
    config_path: Path | None,
) -> None:
    """Configure logging for server mode.

    Args:
        log_level: CLI override for log level.
        log_format: CLI override for log format.
        config_path: Path to config file for reading logging settings.
    """
    from hlsladder.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        config_path=config_path,
        level=log_level,
        format=log_format,
        include_stderr=True,  # Always include stderr for journald
    )


async def run_server(bind: str, port: int, config: HLSLadderConfig) -> int:
    """Run the HTTP server until a shutdown signal arrives.

    Args:
        bind: Address to bind to.
        port: Port to bind to.
        config: Effective configuration.

    Returns:
        Exit code (0 for clean shutdown, non-zero for errors).
    """
    from aiohttp import web

    from hlsladder.pipeline.jobs import TranscodeService
    from hlsladder.pipeline.runner import build_pipeline
    from hlsladder.server.app import create_app
    from hlsladder.server.lifecycle import ServerLifecycle
    from hlsladder.server.signals import (
        remove_signal_handlers,
        setup_signal_handlers,
    )

    service = TranscodeService(
        build_pipeline(config),
        job_retention=config.server.job_retention,
        max_retained_jobs=config.server.max_retained_jobs,
    )

    lifecycle = ServerLifecycle(shutdown_timeout=config.server.shutdown_timeout)
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    setup_signal_handlers(loop, lifecycle, shutdown_event)

    app = create_app(service, config.server)
    app["lifecycle"] = lifecycle

    runner = web.AppRunner(app)
    await runner.setup()

    try:
        site = web.TCPSite(runner, bind, port)
        await site.start()

        logger.info(
            "hlsladder server started on http://%s:%d (PID %d)",
            bind,
            port,
            os.getpid(),
        )
        logger.info("Upload endpoint: http://%s:%d/upload", bind, port)
        logger.info("Press Ctrl+C or send SIGTERM to stop")

        await shutdown_event.wait()

        logger.info(
            "Shutdown initiated, waiting up to %.1fs for jobs to stop",
            lifecycle.shutdown_timeout,
        )
    except OSError as e:
        if e.errno == 98:
            logger.error("Port %d is already in use", port)
            return ExitCode.GENERAL_ERROR
        if e.errno == 99:
            logger.error("Cannot bind to address %s", bind)
            return ExitCode.GENERAL_ERROR
        logger.error("Server error: %s", e)
        return ExitCode.GENERAL_ERROR
    finally:
        remove_signal_handlers(loop)
        await runner.cleanup()
        logger.info("hlsladder server stopped")

    return ExitCode.SUCCESS


@click.command("serve")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.hlsladder/config.toml).",
)
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 127.0.0.1).",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (default: 3000).",
)
@click.option(
    "--output-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for published HLS assets.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level for server mode (default: info).",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default=None,
    help="Log format: text or json (default: text).",
)
def serve_command(
    config_path: Path | None,
    bind: str | None,
    port: int | None,
    output_root: Path | None,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Run the upload and HLS playback server.

    Accepts uploads on POST /upload, reports job status under /api/jobs,
    lists assets on /videos and serves published playlists under /hls.

    Configuration precedence (highest to lowest):
      1. CLI flags (--bind, --port, --log-level, etc.)
      2. Environment variables (HLSLADDER_*)
      3. Config file (--config or ~/.hlsladder/config.toml)
      4. Default values

    \b
    Examples:
        hlsladder serve                     # Start with defaults
        hlsladder serve --port 9000         # Custom port
        hlsladder serve --bind 0.0.0.0      # Listen on all interfaces
        hlsladder serve --log-format json   # JSON logging for systemd
    """
    try:
        _configure_server_logging(log_level, log_format, config_path)
        config = get_config(config_path=config_path, output_root=output_root)
    except ValueError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    server_bind = bind if bind is not None else config.server.bind
    server_port = port if port is not None else config.server.port

    if not 1 <= server_port <= 65535:
        click.echo(f"Error: Port must be 1-65535, got {server_port}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    if server_port < 1024:
        logger.warning("Port %d is privileged and may require root", server_port)

    from hlsladder.executor.interface import ToolNotAvailableError

    logger.info(
        "Starting hlsladder server (bind=%s, port=%d, max_encodes=%d)",
        server_bind,
        server_port,
        config.encoding.max_concurrent_encodes,
    )

    try:
        exit_code = asyncio.run(run_server(server_bind, server_port, config))
    except ToolNotAvailableError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)
    except KeyboardInterrupt:
        logger.info("Interrupted before server started")
        sys.exit(ExitCode.INTERRUPTED)
    sys.exit(exit_code)
