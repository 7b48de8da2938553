"""Fixtures for CLI tests."""

import pytest


@pytest.fixture(autouse=True)
def isolated_cli_env(monkeypatch, tmp_path):
    """Keep CLI commands away from the user's config and log setup."""
    monkeypatch.setenv("HLSLADDER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HLSLADDER_CONFIG_PATH", str(tmp_path / "data" / "none.toml"))
    monkeypatch.setattr("hlsladder.cli._configure_logging", lambda *args: None)
