"""Transcode pipeline: stage sequencing, job tracking and errors.

The runner and job service live in ``hlsladder.pipeline.runner`` and
``hlsladder.pipeline.jobs``; only the exception taxonomy is re-exported
here because every stage module depends on it.
"""

from hlsladder.pipeline.exceptions import (
    EncodeCancelled,
    EncodeFailure,
    MissingUpload,
    NoCompatibleAudio,
    NoFeasibleRendition,
    PipelineError,
    ProbeFailure,
    WriteFailure,
)

__all__ = [
    "EncodeCancelled",
    "EncodeFailure",
    "MissingUpload",
    "NoCompatibleAudio",
    "NoFeasibleRendition",
    "PipelineError",
    "ProbeFailure",
    "WriteFailure",
]
