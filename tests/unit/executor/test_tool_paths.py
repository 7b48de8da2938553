"""Tests for external tool resolution."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from hlsladder.executor.interface import (
    ToolNotAvailableError,
    check_tool_availability,
    get_tool_path,
    refresh_tool_paths,
    require_tool,
)


@pytest.fixture(autouse=True)
def fresh_cache():
    refresh_tool_paths()
    yield
    refresh_tool_paths()


def _config(**tools):
    config = MagicMock()
    config.get_tool_path.side_effect = lambda name: tools.get(name)
    return config


class TestGetToolPath:
    """Tests for get_tool_path."""

    def test_configured_file_wins(self, tmp_path):
        binary = tmp_path / "ffmpeg"
        binary.write_text("")
        with (
            patch("hlsladder.config.get_config", return_value=_config(ffmpeg=binary)),
            patch("hlsladder.executor.interface.shutil.which") as mock_which,
        ):
            assert get_tool_path("ffmpeg") == binary
        mock_which.assert_not_called()

    def test_falls_back_to_path_lookup(self):
        with (
            patch("hlsladder.config.get_config", return_value=_config()),
            patch(
                "hlsladder.executor.interface.shutil.which",
                return_value="/usr/bin/ffprobe",
            ),
        ):
            assert get_tool_path("ffprobe") == Path("/usr/bin/ffprobe")

    def test_result_is_cached_until_refresh(self):
        with (
            patch("hlsladder.config.get_config", return_value=_config()),
            patch(
                "hlsladder.executor.interface.shutil.which", return_value=None
            ) as mock_which,
        ):
            assert get_tool_path("ffmpeg") is None
            assert get_tool_path("ffmpeg") is None
            assert mock_which.call_count == 1

            refresh_tool_paths()
            get_tool_path("ffmpeg")
            assert mock_which.call_count == 2


class TestRequireTool:
    """Tests for require_tool."""

    def test_missing_tool_raises(self):
        with (
            patch("hlsladder.config.get_config", return_value=_config()),
            patch("hlsladder.executor.interface.shutil.which", return_value=None),
        ):
            with pytest.raises(ToolNotAvailableError) as exc_info:
                require_tool("ffmpeg")

        assert exc_info.value.tool_name == "ffmpeg"
        assert "HLSLADDER_FFMPEG_PATH" in str(exc_info.value)

    def test_availability_report(self):
        with (
            patch("hlsladder.config.get_config", return_value=_config()),
            patch(
                "hlsladder.executor.interface.shutil.which",
                side_effect=lambda name: "/usr/bin/ffmpeg" if name == "ffmpeg" else None,
            ),
        ):
            assert check_tool_availability() == {"ffmpeg": True, "ffprobe": False}
