"""On-disk layout of uploads and published HLS assets.

Layout under the output root::

    <output_root>/<asset_id>/master.m3u8
    <output_root>/<asset_id>/<label>/index_<label>.m3u8
    <output_root>/<asset_id>/<label>/segment_<n>_<label>.ts

Asset ids are allocated by creating the asset directory exclusively, so two
concurrent uploads can never share a directory even if their names collide.
"""

from __future__ import annotations

import logging
import re
import secrets
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from hlsladder.manifest.master import MASTER_PLAYLIST_NAME

logger = logging.getLogger(__name__)

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
_MAX_SLUG_LENGTH = 40
_MAX_ALLOCATE_ATTEMPTS = 10


@dataclass(frozen=True)
class AssetEntry:
    """A directory under the output root."""

    asset_id: str
    published: bool

    def to_dict(self) -> dict:
        return {"id": self.asset_id, "published": self.published}


def slugify(name: str) -> str:
    """Reduce a file name to a lowercase, filesystem-safe slug.

    Returns "video" when nothing usable remains.
    """
    stem = Path(name).stem if name else ""
    slug = _SLUG_INVALID.sub("-", stem.casefold()).strip("-")
    return slug[:_MAX_SLUG_LENGTH].rstrip("-") or "video"


class AssetStore:
    """Owns the output root and the upload staging directory."""

    def __init__(self, output_root: Path, upload_root: Path | None = None) -> None:
        self.output_root = Path(output_root)
        self.upload_root = Path(upload_root) if upload_root else None

    def ensure_roots(self) -> None:
        """Create the output and upload roots if missing."""
        self.output_root.mkdir(parents=True, exist_ok=True)
        if self.upload_root is not None:
            self.upload_root.mkdir(parents=True, exist_ok=True)

    def _new_asset_id(self, original_name: str) -> str:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        return f"{slugify(original_name)}-{stamp}-{secrets.token_hex(3)}"

    def allocate(self, original_name: str) -> str:
        """Allocate a fresh asset id and create its directory.

        Args:
            original_name: Client-supplied file name, used for the slug.

        Returns:
            The new asset id.

        Raises:
            FileExistsError: If no unused id was found (practically never).
        """
        self.output_root.mkdir(parents=True, exist_ok=True)
        for _ in range(_MAX_ALLOCATE_ATTEMPTS):
            asset_id = self._new_asset_id(original_name)
            try:
                (self.output_root / asset_id).mkdir()
            except FileExistsError:
                logger.debug("Asset id collision for %s, retrying", asset_id)
                continue
            logger.debug("Allocated asset %s", asset_id)
            return asset_id
        raise FileExistsError(
            f"Could not allocate a unique asset id for {original_name!r}"
        )

    def asset_dir(self, asset_id: str) -> Path:
        """Return the asset root directory.

        Raises:
            ValueError: If asset_id is not a plain directory name.
        """
        if not asset_id or asset_id in (".", "..") or Path(asset_id).name != asset_id:
            raise ValueError(f"Invalid asset id: {asset_id!r}")
        return self.output_root / asset_id

    def master_path(self, asset_id: str) -> Path:
        return self.asset_dir(asset_id) / MASTER_PLAYLIST_NAME

    def is_published(self, asset_id: str) -> bool:
        return self.master_path(asset_id).is_file()

    def list_assets(self) -> list[AssetEntry]:
        """List asset directories, sorted by id.

        Hidden directories are skipped. A missing output root yields an
        empty list.
        """
        if not self.output_root.is_dir():
            return []
        entries = []
        for child in sorted(self.output_root.iterdir()):
            if not child.is_dir() or child.name.startswith("."):
                continue
            entries.append(
                AssetEntry(
                    asset_id=child.name,
                    published=(child / MASTER_PLAYLIST_NAME).is_file(),
                )
            )
        return entries

    def purge_partial(self, asset_id: str) -> None:
        """Remove everything inside an asset root but keep the root itself.

        Used after a failed run so that no half-written renditions remain
        and no master playlist exists.
        """
        root = self.asset_dir(asset_id)
        if not root.is_dir():
            return
        for child in root.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child, ignore_errors=True)
            else:
                child.unlink(missing_ok=True)
        logger.info("Purged partial output for %s", asset_id)

    def discard(self, asset_id: str) -> None:
        """Remove an asset directory entirely."""
        root = self.asset_dir(asset_id)
        if root.exists():
            shutil.rmtree(root, ignore_errors=True)
            logger.info("Discarded asset %s", asset_id)

    def stage_upload(self, filename: str) -> Path:
        """Return a fresh path in the upload root for an incoming file.

        The client's extension is kept; the base name is replaced with a
        slug plus random suffix so uploads never overwrite each other.
        """
        if self.upload_root is None:
            raise ValueError("AssetStore has no upload root")
        self.upload_root.mkdir(parents=True, exist_ok=True)
        suffix = Path(filename).suffix.casefold() if filename else ""
        if not re.fullmatch(r"\.[a-z0-9]{1,8}", suffix):
            suffix = ""
        return self.upload_root / f"{slugify(filename)}-{secrets.token_hex(4)}{suffix}"

    def release_upload(self, path: Path) -> bool:
        """Delete a staged upload once its job is finished.

        Only files directly inside the upload root are removed.

        Returns:
            True if a file was deleted.
        """
        if self.upload_root is None or path.parent != self.upload_root:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.debug("Released staged upload %s", path.name)
        return True
