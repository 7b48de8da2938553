"""Asset storage: output root layout, asset ids and upload staging."""

from hlsladder.store.asset_store import AssetEntry, AssetStore, slugify

__all__ = ["AssetEntry", "AssetStore", "slugify"]
