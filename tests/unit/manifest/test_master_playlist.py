"""Tests for master playlist assembly."""

from pathlib import Path
from unittest.mock import patch

import pytest

from hlsladder.domain.models import AudioTrack, FeasiblePlan
from hlsladder.manifest.master import (
    MASTER_PLAYLIST_NAME,
    VariantEntry,
    assemble,
    parse_master_playlist,
    render_master_playlist,
    write_atomic,
)
from hlsladder.pipeline.exceptions import WriteFailure
from hlsladder.planner.ladder import RENDITION_LADDER


def _plan(root: Path, count: int = 4) -> FeasiblePlan:
    return FeasiblePlan(
        source_path=root / "in.mp4",
        renditions=RENDITION_LADDER[4 - count :],
        selected_audio=AudioTrack(1, "aac"),
        output_root=root,
    )


class TestRenderMasterPlaylist:
    """Tests for render_master_playlist."""

    def test_full_ladder(self, tmp_path):
        text = render_master_playlist(_plan(tmp_path))

        assert text == (
            "#EXTM3U\n"
            "#EXT-X-STREAM-INF:BANDWIDTH=5000000,RESOLUTION=1920x1080\n"
            "1080/index_1080.m3u8\n"
            "#EXT-X-STREAM-INF:BANDWIDTH=2800000,RESOLUTION=1280x720\n"
            "720/index_720.m3u8\n"
            "#EXT-X-STREAM-INF:BANDWIDTH=1400000,RESOLUTION=854x480\n"
            "480/index_480.m3u8\n"
            "#EXT-X-STREAM-INF:BANDWIDTH=800000,RESOLUTION=640x360\n"
            "360/index_360.m3u8\n"
        )

    def test_one_entry_per_rendition(self, tmp_path):
        text = render_master_playlist(_plan(tmp_path, count=2))

        assert text.count("#EXT-X-STREAM-INF") == 2
        assert "1080" not in text

    def test_same_plan_renders_identical_text(self, tmp_path):
        assert render_master_playlist(_plan(tmp_path)) == render_master_playlist(
            _plan(tmp_path)
        )


class TestWriteAtomic:
    """Tests for write_atomic."""

    def test_writes_and_leaves_no_temp_files(self, tmp_path):
        target = tmp_path / "master.m3u8"
        write_atomic(target, "#EXTM3U\n")

        assert target.read_text() == "#EXTM3U\n"
        assert [p.name for p in tmp_path.iterdir()] == ["master.m3u8"]

    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "master.m3u8"
        target.write_text("old")
        write_atomic(target, "new")
        assert target.read_text() == "new"

    def test_failed_rename_removes_temp_file(self, tmp_path):
        target = tmp_path / "master.m3u8"
        with patch("hlsladder.manifest.master.os.replace", side_effect=OSError("EXDEV")):
            with pytest.raises(OSError):
                write_atomic(target, "#EXTM3U\n")

        assert list(tmp_path.iterdir()) == []


class TestAssemble:
    """Tests for assemble."""

    def test_writes_master_in_asset_root(self, tmp_path):
        plan = _plan(tmp_path)
        path = assemble(plan)

        assert path == tmp_path / MASTER_PLAYLIST_NAME
        assert path.read_text() == render_master_playlist(plan)

    def test_explicit_output_root(self, tmp_path):
        other = tmp_path / "other"
        other.mkdir()
        path = assemble(_plan(tmp_path), other)
        assert path.parent == other

    def test_missing_root_raises_write_failure(self, tmp_path):
        plan = _plan(tmp_path / "gone")

        with pytest.raises(WriteFailure) as exc_info:
            assemble(plan)

        assert exc_info.value.stage == "manifest"
        assert not (tmp_path / "gone").exists()

    def test_reassembly_is_byte_identical(self, tmp_path):
        plan = _plan(tmp_path)
        first = assemble(plan).read_bytes()
        second = assemble(plan).read_bytes()
        assert first == second


class TestParseMasterPlaylist:
    """Tests for parse_master_playlist."""

    def test_parses_rendered_playlist(self, tmp_path):
        entries = parse_master_playlist(render_master_playlist(_plan(tmp_path, 2)))

        assert entries == [
            VariantEntry(1_400_000, "854x480", "480/index_480.m3u8"),
            VariantEntry(800_000, "640x360", "360/index_360.m3u8"),
        ]

    def test_ignores_other_tags_and_quoted_attributes(self):
        text = (
            "#EXTM3U\n#EXT-X-VERSION:3\n"
            '#EXT-X-STREAM-INF:BANDWIDTH=100,CODECS="avc1.4d401f,mp4a.40.2",'
            "RESOLUTION=10x10\n"
            "a.m3u8\n"
        )
        assert parse_master_playlist(text) == [VariantEntry(100, "10x10", "a.m3u8")]

    def test_rejects_non_playlist(self):
        with pytest.raises(ValueError, match="EXTM3U"):
            parse_master_playlist("hello\n")

    def test_rejects_dangling_entry(self):
        with pytest.raises(ValueError, match="URI"):
            parse_master_playlist("#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=1\n")
