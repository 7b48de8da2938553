"""Tests for FFprobeInspector."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from hlsladder.domain.models import AudioTrack
from hlsladder.introspector.ffprobe import FFprobeInspector
from hlsladder.pipeline.exceptions import MissingUpload, ProbeFailure

FFPROBE = Path("/usr/bin/ffprobe")


@pytest.fixture
def inspector() -> FFprobeInspector:
    return FFprobeInspector(ffprobe_path=FFPROBE, timeout=5.0)


class TestCommands:
    """Tests for the ffprobe argv builders."""

    def test_geometry_command(self, inspector):
        cmd = inspector.geometry_command(Path("/in/my clip.mp4"))
        assert cmd == [
            "/usr/bin/ffprobe",
            "-v",
            "error",
            "-select_streams",
            "v:0",
            "-show_entries",
            "stream=width,height",
            "-of",
            "csv=p=0:s=x",
            "/in/my clip.mp4",
        ]

    def test_audio_command(self, inspector):
        cmd = inspector.audio_command(Path("/in/a.mkv"))
        assert cmd[-1] == "/in/a.mkv"
        assert "stream=index,codec_type,codec_name" in cmd
        assert cmd[cmd.index("-of") + 1] == "json"

    def test_hostile_file_name_stays_one_argument(self, inspector):
        name = Path('/in/"; rm -rf ~; echo ".mp4')
        cmd = inspector.geometry_command(name)
        assert cmd[-1] == str(name)


class TestInspect:
    """Tests for FFprobeInspector.inspect."""

    def test_success(self, inspector, source_file, audio_json):
        outputs = [
            ("1280x720\n", "", 0),
            (audio_json("opus", "aac"), "", 0),
        ]
        with patch(
            "hlsladder.introspector.ffprobe.run_command", side_effect=outputs
        ) as mock_run:
            descriptor = inspector.inspect(source_file)

        assert descriptor.width == 1280
        assert descriptor.height == 720
        assert descriptor.audio_tracks == (AudioTrack(1, "opus"), AudioTrack(2, "aac"))
        assert mock_run.call_count == 2
        assert mock_run.call_args.kwargs["timeout"] == 5.0

    def test_missing_file(self, inspector, tmp_path):
        with pytest.raises(MissingUpload):
            inspector.inspect(tmp_path / "gone.mp4")

    def test_nonzero_exit_carries_stderr(self, inspector, source_file):
        with patch(
            "hlsladder.introspector.ffprobe.run_command",
            return_value=("", "moov atom not found\n", 1),
        ):
            with pytest.raises(ProbeFailure) as exc_info:
                inspector.inspect(source_file)

        assert exc_info.value.diagnostics == "moov atom not found"
        assert "exit code 1" in str(exc_info.value)

    def test_timeout(self, inspector, source_file):
        with patch(
            "hlsladder.introspector.ffprobe.run_command",
            side_effect=subprocess.TimeoutExpired(cmd="ffprobe", timeout=5.0),
        ):
            with pytest.raises(ProbeFailure, match="timed out"):
                inspector.inspect(source_file)

    def test_binary_missing(self, source_file):
        inspector = FFprobeInspector(ffprobe_path=Path("/nonexistent/ffprobe"))
        with patch(
            "hlsladder.introspector.ffprobe.run_command",
            side_effect=FileNotFoundError(),
        ):
            with pytest.raises(ProbeFailure, match="not found"):
                inspector.inspect(source_file)

    def test_audio_query_failure(self, inspector, source_file):
        outputs = [("1920x1080\n", "", 0), ("", "error reading", 1)]
        with patch("hlsladder.introspector.ffprobe.run_command", side_effect=outputs):
            with pytest.raises(ProbeFailure):
                inspector.inspect(source_file)

    def test_no_video_stream(self, inspector, source_file):
        with patch(
            "hlsladder.introspector.ffprobe.run_command", return_value=("", "", 0)
        ):
            with pytest.raises(ProbeFailure, match="no video stream"):
                inspector.inspect(source_file)
