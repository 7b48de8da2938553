"""Exceptions raised by the transcode pipeline.

Every pipeline failure is terminal for the upload it belongs to. Each
exception records the stage that raised it so callers can report
"where" as well as "why", and keeps any diagnostic text captured from
ffprobe/ffmpeg so it reaches the operator instead of being swallowed.
"""

from __future__ import annotations

# Stage names, in pipeline order
STAGE_INTAKE = "intake"
STAGE_INSPECT = "inspect"
STAGE_PLAN = "plan"
STAGE_ENCODE = "encode"
STAGE_MANIFEST = "manifest"


class PipelineError(Exception):
    """Base exception for pipeline failures.

    Attributes:
        stage: Pipeline stage where the failure happened.
        code: Machine-readable error code reported to API clients.
        diagnostics: Raw diagnostic text from an external tool, if any.
    """

    stage: str = "pipeline"
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, diagnostics: str | None = None) -> None:
        self.diagnostics = diagnostics
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {
            "error": str(self),
            "code": self.code,
            "stage": self.stage,
        }
        if self.diagnostics:
            body["details"] = self.diagnostics
        return body


class MissingUpload(PipelineError):
    """Raised when no source file was supplied or it no longer exists."""

    stage = STAGE_INTAKE
    code = "MISSING_UPLOAD"


class ProbeFailure(PipelineError):
    """Raised when ffprobe fails or its output cannot be understood."""

    stage = STAGE_INSPECT
    code = "PROBE_FAILED"


class NoFeasibleRendition(PipelineError):
    """Raised when the source is smaller than every ladder rendition.

    Attributes:
        width: Source width in pixels.
        height: Source height in pixels.
    """

    stage = STAGE_PLAN
    code = "NO_FEASIBLE_RENDITION"

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        super().__init__(
            f"Input video resolution {width}x{height} is too low "
            "for any HLS variant"
        )


class NoCompatibleAudio(PipelineError):
    """Raised when the source has no AAC or MP3 audio stream.

    Attributes:
        codecs: Codecs of the audio streams that were found.
    """

    stage = STAGE_PLAN
    code = "NO_COMPATIBLE_AUDIO"

    def __init__(self, codecs: list[str]) -> None:
        self.codecs = codecs
        found = ", ".join(codecs) if codecs else "none"
        super().__init__(
            "No compatible audio stream found (need AAC or MP3, "
            f"found: {found})"
        )


class EncodeFailure(PipelineError):
    """Raised when ffmpeg fails, times out, or leaves outputs missing."""

    stage = STAGE_ENCODE
    code = "ENCODE_FAILED"


class EncodeCancelled(EncodeFailure):
    """Raised when a run is stopped through its cancellation hook.

    The stage defaults to encode; a cancellation noticed earlier records
    the stage it was noticed at.
    """

    code = "ENCODE_CANCELLED"

    def __init__(
        self,
        message: str,
        diagnostics: str | None = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message, diagnostics)
        if stage is not None:
            self.stage = stage


class WriteFailure(PipelineError):
    """Raised when the master playlist cannot be written."""

    stage = STAGE_MANIFEST
    code = "WRITE_FAILED"
