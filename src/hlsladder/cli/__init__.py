"""CLI module for hlsladder."""

import logging
from pathlib import Path

import click

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from CLI options.

    Args:
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    from hlsladder.config.logging_factory import configure_logging_from_cli

    configure_logging_from_cli(
        level=log_level,
        file=log_file,
        format="json" if log_json else None,
    )
    _logging_configured = True


@click.group()
@click.version_option(package_name="hlsladder")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """hlsladder - Transcode uploaded videos into adaptive HLS assets."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file

    try:
        _configure_logging(log_level, log_file, log_json)
    except ValueError as e:
        from hlsladder.cli.exit_codes import ExitCode
        from hlsladder.cli.output import error_exit

        error_exit(f"Invalid configuration: {e}", ExitCode.CONFIG_ERROR)


# Defer import to avoid circular dependency
def _register_commands():
    from hlsladder.cli.assets import assets_command
    from hlsladder.cli.inspect import inspect_command
    from hlsladder.cli.serve import serve_command
    from hlsladder.cli.transcode import transcode_command

    main.add_command(assets_command)
    main.add_command(inspect_command)
    main.add_command(serve_command)
    main.add_command(transcode_command)


_register_commands()
