"""Domain models for the HLS transcode pipeline.

These models describe a single upload as it moves through the pipeline:
what the source contains, which renditions it can feed, how the encoder
is instructed, and what ends up on disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class AudioTrack:
    """An audio stream inside the source container."""

    stream_index: int
    """Container-relative stream index as reported by ffprobe."""

    codec: str
    """Casefolded codec name (e.g. "aac", "mp3", "opus")."""


@dataclass(frozen=True)
class InputDescriptor:
    """Properties of an uploaded video, produced once by the inspector."""

    path: Path
    width: int
    height: int
    audio_tracks: tuple[AudioTrack, ...] = ()

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class RenditionProfile:
    """One rung of the bitrate ladder."""

    label: str
    width: int
    height: int
    video_bitrate: str
    max_rate: str
    buffer_size: str
    bandwidth_bits: int

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def playlist_name(self) -> str:
        """File name of this rendition's sub-playlist."""
        return f"index_{self.label}.m3u8"

    @property
    def segment_template(self) -> str:
        """ffmpeg segment file name template for this rendition."""
        return f"segment_%d_{self.label}.ts"

    @property
    def playlist_uri(self) -> str:
        """Sub-playlist path relative to the asset root."""
        return f"{self.label}/{self.playlist_name}"


@dataclass(frozen=True)
class FeasiblePlan:
    """Renditions that can be produced from one source, plus its audio."""

    source_path: Path
    renditions: tuple[RenditionProfile, ...]
    selected_audio: AudioTrack
    output_root: Path

    def __post_init__(self) -> None:
        if not self.renditions:
            raise ValueError("FeasiblePlan requires at least one rendition")

    @property
    def labels(self) -> list[str]:
        return [r.label for r in self.renditions]


@dataclass(frozen=True)
class OutputTarget:
    """A single HLS output of the encoder."""

    rendition: RenditionProfile
    segment_pattern: Path
    playlist_path: Path

    @property
    def label(self) -> str:
        return self.rendition.label


@dataclass(frozen=True)
class EncodeJob:
    """Concrete encoder instructions for one upload.

    ``filter_graph`` decodes the source video once and fans it out to one
    scaled branch per output target, in ladder order.
    """

    source_path: Path
    audio_stream_index: int
    filter_graph: str
    output_targets: tuple[OutputTarget, ...]

    @property
    def expected_playlists(self) -> list[Path]:
        return [t.playlist_path for t in self.output_targets]


@dataclass
class PublishedAsset:
    """A fully published HLS asset on disk."""

    asset_id: str
    root: Path
    master_playlist: Path
    renditions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "asset_id": self.asset_id,
            "root": str(self.root),
            "master_playlist": str(self.master_playlist),
            "renditions": list(self.renditions),
        }
