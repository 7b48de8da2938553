"""Tests for EnvReader class."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from hlsladder.config.env import EnvReader


class TestEnvReaderGetStr:
    """Tests for EnvReader.get_str method."""

    def test_returns_value_when_set(self) -> None:
        """Should return the value when environment variable is set."""
        reader = EnvReader(env={"MY_VAR": "hello"})
        assert reader.get_str("MY_VAR") == "hello"

    def test_returns_default_when_not_set(self) -> None:
        """Should return default when environment variable is not set."""
        reader = EnvReader(env={})
        assert reader.get_str("MY_VAR", "default") == "default"

    def test_returns_empty_string_when_set_to_empty(self) -> None:
        """Should return empty string when variable is set to empty."""
        reader = EnvReader(env={"MY_VAR": ""})
        assert reader.get_str("MY_VAR", "default") == ""


class TestEnvReaderGetInt:
    """Tests for EnvReader.get_int method."""

    def test_parses_integer(self) -> None:
        """Should convert the value to int."""
        reader = EnvReader(env={"HLSLADDER_SERVER_PORT": "9000"})
        assert reader.get_int("HLSLADDER_SERVER_PORT", 3000) == 9000

    def test_invalid_value_logs_and_returns_default(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Should warn and fall back on non-integer values."""
        reader = EnvReader(env={"HLSLADDER_SERVER_PORT": "eighty"})
        with caplog.at_level(logging.WARNING):
            assert reader.get_int("HLSLADDER_SERVER_PORT", 3000) == 3000
        assert "Invalid integer value" in caplog.text


class TestEnvReaderGetFloat:
    """Tests for EnvReader.get_float method."""

    def test_parses_float(self) -> None:
        """Should convert the value to float."""
        reader = EnvReader(env={"T": "2.5"})
        assert reader.get_float("T") == 2.5

    def test_invalid_value_returns_default(self) -> None:
        """Should fall back on non-numeric values."""
        reader = EnvReader(env={"T": "soon"})
        assert reader.get_float("T", 1.0) == 1.0


class TestEnvReaderGetBool:
    """Tests for EnvReader.get_bool method."""

    @pytest.mark.parametrize("value", ["true", "1", "YES", "On"])
    def test_truthy_values(self, value: str) -> None:
        """Should treat common truthy strings as True."""
        assert EnvReader(env={"B": value}).get_bool("B") is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "anything"])
    def test_other_values_are_false(self, value: str) -> None:
        """Should treat everything else as False."""
        assert EnvReader(env={"B": value}).get_bool("B") is False


class TestEnvReaderGetPath:
    """Tests for EnvReader.get_path method."""

    def test_expands_tilde(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        """Should expand tilde in path."""
        monkeypatch.setenv("HOME", str(tmp_path))
        reader = EnvReader(env={"P": "~/videos"})
        assert reader.get_path("P") == tmp_path / "videos"

    def test_blank_value_returns_default(self) -> None:
        """Should treat whitespace-only values as unset."""
        reader = EnvReader(env={"P": "  "})
        assert reader.get_path("P", Path("/srv")) == Path("/srv")
