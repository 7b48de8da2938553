"""Fixtures for HTTP server tests."""

import pytest
from aiohttp import FormData

from hlsladder.config.models import ServerConfig
from hlsladder.pipeline.jobs import TranscodeService
from hlsladder.server.app import create_app


@pytest.fixture
def service(make_pipeline):
    """TranscodeService backed by the stub pipeline."""
    return TranscodeService(make_pipeline())


@pytest.fixture
def app(service):
    """Application with a small upload limit."""
    return create_app(service, ServerConfig(max_upload_bytes=1024))


@pytest.fixture
def video_form():
    """Factory for multipart upload bodies."""

    def _make(field="video", filename="clip.mp4", payload=b"\x00\x00\x00\x18ftypmp42"):
        data = FormData()
        data.add_field(field, payload, filename=filename, content_type="video/mp4")
        return data

    return _make
