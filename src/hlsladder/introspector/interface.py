"""MediaInspector interface for source video inspection."""

from pathlib import Path
from typing import Protocol

from hlsladder.domain.models import InputDescriptor


class MediaInspector(Protocol):
    """Protocol for media inspection implementations.

    An inspector reads a source file once and reports the properties the
    planner needs: frame geometry and the audio streams.
    """

    def inspect(self, path: Path) -> InputDescriptor:
        """Inspect a source video.

        Args:
            path: Path to the uploaded video.

        Returns:
            InputDescriptor for the file.

        Raises:
            MissingUpload: If the file does not exist.
            ProbeFailure: If the file cannot be inspected.
        """
        ...
