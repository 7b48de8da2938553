"""Shared CLI output helpers."""

from __future__ import annotations

import json
import sys
from typing import NoReturn

import click

from hlsladder.cli.exit_codes import ExitCode


def error_exit(
    message: str,
    code: ExitCode | int,
    json_output: bool = False,
) -> NoReturn:
    """Exit with formatted error message.

    Args:
        message: Error message to display.
        code: Exit code to use (ExitCode enum or int).
        json_output: Whether to format output as JSON.

    Note:
        This function never returns; it always calls sys.exit().
    """
    code_name = code.name if isinstance(code, ExitCode) else "UNKNOWN_ERROR"

    if json_output:
        click.echo(
            json.dumps(
                {
                    "status": "failed",
                    "error": {"code": code_name, "message": message},
                }
            ),
            err=True,
        )
    else:
        click.echo(f"Error: {message}", err=True)

    sys.exit(int(code))
