"""Structured logging for hlsladder.

Text or JSON output, optional rotating log file, and per-asset context so
records from concurrent pipelines can be told apart.
"""

from hlsladder.logging.config import configure_logging, make_formatter
from hlsladder.logging.context import (
    AssetContextFilter,
    asset_context,
    get_asset_context,
    set_asset_context,
    set_stage,
)
from hlsladder.logging.formatters import JSONFormatter, PipelineTextFormatter

__all__ = [
    "AssetContextFilter",
    "JSONFormatter",
    "PipelineTextFormatter",
    "asset_context",
    "configure_logging",
    "get_asset_context",
    "make_formatter",
    "set_asset_context",
    "set_stage",
]
