"""Shared test fixtures for hlsladder."""

import json
import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from hlsladder.domain.models import AudioTrack, EncodeJob, InputDescriptor
from hlsladder.executor.interface import EncodeResult
from hlsladder.pipeline.exceptions import EncodeCancelled, EncodeFailure
from hlsladder.pipeline.runner import TranscodePipeline
from hlsladder.store.asset_store import AssetStore


def load_ffprobe_fixture(name: str) -> str:
    """Load raw ffprobe JSON output by fixture name (without .json)."""
    fixture_path = Path(__file__).parent / "fixtures" / "ffprobe" / f"{name}.json"
    return fixture_path.read_text()


def make_descriptor(
    path: Path,
    width: int,
    height: int,
    codecs: list[str] | None = None,
) -> InputDescriptor:
    """Build an InputDescriptor whose audio streams start at index 1."""
    tracks = tuple(
        AudioTrack(stream_index=i + 1, codec=codec)
        for i, codec in enumerate(codecs or [])
    )
    return InputDescriptor(path=path, width=width, height=height, audio_tracks=tracks)


class StubInspector:
    """MediaInspector returning a fixed descriptor (or raising)."""

    def __init__(self, width: int = 1920, height: int = 1080, codecs=("aac",)):
        self.width = width
        self.height = height
        self.codecs = list(codecs)
        self.error: Exception | None = None
        self.calls: list[Path] = []

    def inspect(self, path: Path) -> InputDescriptor:
        self.calls.append(path)
        if self.error is not None:
            raise self.error
        return make_descriptor(path, self.width, self.height, self.codecs)


class StubExecutor:
    """Encode executor that writes playlists instead of running ffmpeg.

    ``fail_with`` makes execute() write partial output and raise.
    ``block`` makes execute() wait until released or cancelled.
    """

    def __init__(self) -> None:
        self.jobs: list[EncodeJob] = []
        self.fail_with: Exception | None = None
        self.block = threading.Event()
        self.block.set()
        self.started = threading.Event()
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def execute(self, job: EncodeJob, cancel_event=None, progress_callback=None):
        with self._lock:
            self.jobs.append(job)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        self.started.set()
        try:
            for target in job.output_targets:
                target.playlist_path.parent.mkdir(parents=True, exist_ok=True)
                (target.playlist_path.parent / f"segment_0_{target.label}.ts").write_bytes(
                    b"\x47" * 188
                )

            while not self.block.wait(timeout=0.01):
                if cancel_event is not None and cancel_event.is_set():
                    raise EncodeCancelled("Encode cancelled")

            if self.fail_with is not None:
                raise self.fail_with

            for target in job.output_targets:
                target.playlist_path.write_text(
                    "#EXTM3U\n#EXT-X-PLAYLIST-TYPE:VOD\n#EXT-X-ENDLIST\n"
                )
            return EncodeResult(playlists=tuple(job.expected_playlists))
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    """A placeholder uploaded video file."""
    path = tmp_path / "uploads" / "clip.mp4"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path


@pytest.fixture
def store(tmp_path: Path) -> AssetStore:
    """AssetStore rooted in a temporary directory."""
    s = AssetStore(tmp_path / "hls", tmp_path / "uploads")
    s.ensure_roots()
    return s


@pytest.fixture
def stub_inspector() -> StubInspector:
    return StubInspector()


@pytest.fixture
def stub_executor() -> StubExecutor:
    return StubExecutor()


@pytest.fixture
def make_pipeline(
    store: AssetStore,
    stub_inspector: StubInspector,
    stub_executor: StubExecutor,
) -> Callable[..., TranscodePipeline]:
    """Factory for a pipeline wired to the stub inspector and executor."""

    def _make(max_encodes: int = 2) -> TranscodePipeline:
        return TranscodePipeline(
            store=store,
            inspector=stub_inspector,
            executor=stub_executor,
            encode_slots=threading.BoundedSemaphore(max_encodes),
        )

    return _make


def _audio_streams_json(*codecs: str) -> str:
    streams = [
        {"index": i + 1, "codec_name": codec, "codec_type": "audio"}
        for i, codec in enumerate(codecs)
    ]
    return json.dumps({"programs": [], "streams": streams})


@pytest.fixture
def ffprobe_fixture() -> Callable[[str], str]:
    """Loader for raw ffprobe JSON fixtures."""
    return load_ffprobe_fixture


@pytest.fixture
def audio_json() -> Callable[..., str]:
    """Render ffprobe ``-of json`` output for the given audio codecs."""
    return _audio_streams_json


@pytest.fixture
def descriptor_factory() -> Callable[..., InputDescriptor]:
    """Factory for InputDescriptor with audio streams starting at index 1."""
    return make_descriptor
