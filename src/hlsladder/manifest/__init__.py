"""Master playlist rendering, atomic publication and parsing."""

from hlsladder.manifest.master import (
    MASTER_PLAYLIST_NAME,
    VariantEntry,
    assemble,
    parse_master_playlist,
    render_master_playlist,
)

__all__ = [
    "MASTER_PLAYLIST_NAME",
    "VariantEntry",
    "assemble",
    "parse_master_playlist",
    "render_master_playlist",
]
