"""Asset context for structured logging.

Provides context propagation for pipeline threads using contextvars, so
every record emitted while an upload is processed carries its asset id
and current stage.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_asset_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "asset_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


def set_asset_context(asset_id: str | None, stage: str | None = None) -> None:
    """Set the current asset context."""
    _asset_id.set(asset_id)
    _stage.set(stage)


def set_stage(stage: str | None) -> None:
    """Update only the stage of the current asset context."""
    _stage.set(stage)


def get_asset_context() -> tuple[str | None, str | None]:
    """Return (asset_id, stage); either may be None."""
    return _asset_id.get(), _stage.get()


@contextmanager
def asset_context(
    asset_id: str,
    stage: str | None = None,
) -> Generator[None, None, None]:
    """Context manager for pipeline processing context.

    Example:
        with asset_context("clip-20261019101500-a1b2c3"):
            logger.info("Inspecting source")  # record carries asset_id
    """
    old_asset_id, old_stage = get_asset_context()
    try:
        set_asset_context(asset_id, stage)
        yield
    finally:
        set_asset_context(old_asset_id, old_stage)


class AssetContextFilter(logging.Filter):
    """Copy the current asset id and stage onto every record.

    Values already present on the record (passed via ``extra``) win.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        asset_id, stage = get_asset_context()
        if getattr(record, "asset_id", None) is None:
            record.asset_id = asset_id
        if getattr(record, "stage", None) is None:
            record.stage = stage
        return True
