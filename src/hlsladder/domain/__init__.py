"""Domain models shared across the transcode pipeline."""

from hlsladder.domain.models import (
    AudioTrack,
    EncodeJob,
    FeasiblePlan,
    InputDescriptor,
    OutputTarget,
    PublishedAsset,
    RenditionProfile,
)

__all__ = [
    "AudioTrack",
    "EncodeJob",
    "FeasiblePlan",
    "InputDescriptor",
    "OutputTarget",
    "PublishedAsset",
    "RenditionProfile",
]
