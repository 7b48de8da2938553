"""The fixed bitrate ladder, highest rendition first."""

from hlsladder.domain.models import RenditionProfile

RENDITION_LADDER: tuple[RenditionProfile, ...] = (
    RenditionProfile(
        label="1080",
        width=1920,
        height=1080,
        video_bitrate="5000k",
        max_rate="5350k",
        buffer_size="7500k",
        bandwidth_bits=5_000_000,
    ),
    RenditionProfile(
        label="720",
        width=1280,
        height=720,
        video_bitrate="2800k",
        max_rate="2996k",
        buffer_size="4200k",
        bandwidth_bits=2_800_000,
    ),
    RenditionProfile(
        label="480",
        width=854,
        height=480,
        video_bitrate="1400k",
        max_rate="1498k",
        buffer_size="2100k",
        bandwidth_bits=1_400_000,
    ),
    RenditionProfile(
        label="360",
        width=640,
        height=360,
        video_bitrate="800k",
        max_rate="856k",
        buffer_size="1200k",
        bandwidth_bits=800_000,
    ),
)

# Audio codecs that can be carried into the renditions
ACCEPTED_AUDIO_CODECS: frozenset[str] = frozenset({"aac", "mp3"})


def get_profile(label: str) -> RenditionProfile | None:
    """Look up a ladder entry by label."""
    for profile in RENDITION_LADDER:
        if profile.label == label:
            return profile
    return None
