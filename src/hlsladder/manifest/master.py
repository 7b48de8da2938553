"""Master playlist assembly.

The master playlist lists one ``#EXT-X-STREAM-INF`` entry per rendition, in
ladder order, each followed by the sub-playlist URI relative to the asset
root. It is written last and atomically: a temp file in the asset root is
fsynced and then renamed over ``master.m3u8``, so a reader either sees no
master or a complete one.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path

from hlsladder.domain.models import FeasiblePlan
from hlsladder.pipeline.exceptions import WriteFailure

logger = logging.getLogger(__name__)

MASTER_PLAYLIST_NAME = "master.m3u8"

_STREAM_INF_PREFIX = "#EXT-X-STREAM-INF:"
_ATTRIBUTE_PATTERN = re.compile(r'([A-Z0-9-]+)=("[^"]*"|[^,]*)')


@dataclass(frozen=True)
class VariantEntry:
    """One variant stream listed in a master playlist."""

    bandwidth: int
    resolution: str
    uri: str


def render_master_playlist(plan: FeasiblePlan) -> str:
    """Render master playlist text for a plan.

    Output depends only on the plan's renditions, so identical plans render
    byte-identical text.
    """
    lines = ["#EXTM3U"]
    for rendition in plan.renditions:
        lines.append(
            f"{_STREAM_INF_PREFIX}BANDWIDTH={rendition.bandwidth_bits},"
            f"RESOLUTION={rendition.resolution}"
        )
        lines.append(rendition.playlist_uri)
    return "\n".join(lines) + "\n"


def write_atomic(path: Path, content: str) -> None:
    """Write text to path via a fsynced temp file and os.replace.

    Raises:
        OSError: If any step fails. The temp file is removed on failure.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def assemble(plan: FeasiblePlan, output_root: Path | None = None) -> Path:
    """Write the master playlist for a plan.

    Args:
        plan: The plan whose renditions were encoded.
        output_root: Asset root. Defaults to plan.output_root.

    Returns:
        Path to the written master playlist.

    Raises:
        WriteFailure: If the playlist cannot be written.
    """
    root = output_root if output_root is not None else plan.output_root
    master_path = root / MASTER_PLAYLIST_NAME
    content = render_master_playlist(plan)

    try:
        write_atomic(master_path, content)
    except OSError as e:
        logger.error("Failed to write master playlist %s: %s", master_path, e)
        raise WriteFailure(
            f"Could not write master playlist {master_path}: {e}"
        ) from e

    logger.info(
        "Wrote master playlist with %d variant(s)",
        len(plan.renditions),
        extra={"master_playlist": str(master_path)},
    )
    return master_path


def _parse_attributes(text: str) -> dict[str, str]:
    return {
        key: value.strip('"') for key, value in _ATTRIBUTE_PATTERN.findall(text)
    }


def parse_master_playlist(text: str) -> list[VariantEntry]:
    """Parse the variant entries of a master playlist.

    Raises:
        ValueError: If the text is not a master playlist or an entry has
            no URI line.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines or lines[0] != "#EXTM3U":
        raise ValueError("Playlist does not start with #EXTM3U")

    entries: list[VariantEntry] = []
    pending: dict[str, str] | None = None
    for line in lines[1:]:
        if line.startswith(_STREAM_INF_PREFIX):
            pending = _parse_attributes(line[len(_STREAM_INF_PREFIX) :])
        elif line.startswith("#"):
            continue
        elif pending is not None:
            entries.append(
                VariantEntry(
                    bandwidth=int(pending.get("BANDWIDTH", "0")),
                    resolution=pending.get("RESOLUTION", ""),
                    uri=line,
                )
            )
            pending = None

    if pending is not None:
        raise ValueError("Stream entry without a URI line")
    return entries
