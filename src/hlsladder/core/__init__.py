"""Core utilities shared across hlsladder modules."""

from hlsladder.core.subprocess_utils import run_command

__all__ = ["run_command"]
