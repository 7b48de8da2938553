"""Tests for the transcode CLI command."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from hlsladder.cli import main
from hlsladder.cli.exit_codes import ExitCode
from hlsladder.config.models import HLSLadderConfig
from hlsladder.executor.interface import ToolNotAvailableError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def patched_pipeline(make_pipeline):
    pipeline = make_pipeline()
    with (
        patch("hlsladder.cli.transcode.get_config", return_value=HLSLadderConfig()),
        patch("hlsladder.pipeline.runner.build_pipeline", return_value=pipeline),
    ):
        yield pipeline


class TestTranscodeCommand:
    """Tests for transcode_command."""

    def test_success(self, runner, patched_pipeline, source_file, store):
        result = runner.invoke(main, ["transcode", str(source_file)])

        assert result.exit_code == 0, result.output
        assert "[OK] clip.mp4 -> clip-" in result.output
        assert "(1080, 720, 480, 360)" in result.output
        assert [a.published for a in store.list_assets()] == [True]

    def test_json_output(self, runner, patched_pipeline, source_file):
        result = runner.invoke(main, ["transcode", "--json", str(source_file)])

        assert result.exit_code == 0, result.output
        body = json.loads(result.output)
        assert body["status"] == "completed"
        assert body["results"][0]["success"] is True
        assert body["results"][0]["renditions"] == ["1080", "720", "480", "360"]

    def test_failure_exit_code(
        self, runner, patched_pipeline, source_file, stub_inspector
    ):
        stub_inspector.codecs = ["opus"]

        result = runner.invoke(main, ["transcode", str(source_file)])

        assert result.exit_code == ExitCode.OPERATION_FAILED
        assert "[FAILED] clip.mp4" in result.output
        assert "(stage: plan)" in result.output

    def test_json_failure_includes_error_code(
        self, runner, patched_pipeline, source_file, stub_inspector
    ):
        stub_inspector.width, stub_inspector.height = 320, 240

        result = runner.invoke(main, ["transcode", "--json", str(source_file)])

        body = json.loads(result.output)
        assert body["status"] == "failed"
        assert body["results"][0]["error"]["code"] == "NO_FEASIBLE_RENDITION"

    def test_multiple_files_summary(self, runner, patched_pipeline, tmp_path):
        files = []
        for name in ("a.mp4", "b.mp4"):
            path = tmp_path / name
            path.write_bytes(b"x")
            files.append(str(path))

        result = runner.invoke(main, ["transcode", "--workers", "2", *files])

        assert result.exit_code == 0, result.output
        assert "2 succeeded, 0 failed" in result.output

    def test_missing_file(self, runner, patched_pipeline, tmp_path):
        result = runner.invoke(main, ["transcode", str(tmp_path / "missing.mp4")])

        assert result.exit_code == ExitCode.TARGET_NOT_FOUND
        assert "File(s) not found" in result.output

    def test_tool_not_available(self, runner, source_file):
        with (
            patch("hlsladder.cli.transcode.get_config", return_value=HLSLadderConfig()),
            patch(
                "hlsladder.pipeline.runner.build_pipeline",
                side_effect=ToolNotAvailableError("ffmpeg"),
            ),
        ):
            result = runner.invoke(main, ["transcode", str(source_file)])

        assert result.exit_code == ExitCode.TOOL_NOT_AVAILABLE

    def test_invalid_config(self, runner, source_file):
        with patch(
            "hlsladder.cli.transcode.get_config",
            side_effect=ValueError("max_concurrent_encodes must be at least 1"),
        ):
            result = runner.invoke(main, ["transcode", str(source_file)])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Invalid configuration" in result.output
