"""Tests for the assets CLI command."""

import json

from click.testing import CliRunner

from hlsladder.cli import main
from hlsladder.store.asset_store import AssetStore


def _populate(root):
    store = AssetStore(root)
    published = store.allocate("a.mp4")
    store.master_path(published).write_text("#EXTM3U\n")
    pending = store.allocate("b.mp4")
    return published, pending


class TestAssetsCommand:
    """Tests for assets_command."""

    def test_lists_assets(self, tmp_path):
        published, pending = _populate(tmp_path / "hls")

        result = CliRunner().invoke(
            main, ["assets", "--output-root", str(tmp_path / "hls")]
        )

        assert result.exit_code == 0
        assert f"{published}  published" in result.output
        assert f"{pending}  incomplete" in result.output

    def test_published_only_json(self, tmp_path):
        published, _ = _populate(tmp_path / "hls")

        result = CliRunner().invoke(
            main,
            ["assets", "--output-root", str(tmp_path / "hls"), "--published-only", "--json"],
        )

        assert json.loads(result.output) == {
            "assets": [{"id": published, "published": True}]
        }

    def test_empty(self, tmp_path):
        result = CliRunner().invoke(
            main, ["assets", "--output-root", str(tmp_path / "empty")]
        )
        assert "No assets found." in result.output
