"""Media inspection: geometry and audio streams of an uploaded video."""

from hlsladder.introspector.ffprobe import FFprobeInspector
from hlsladder.introspector.interface import MediaInspector
from hlsladder.introspector.parsers import parse_audio_streams, parse_geometry

__all__ = [
    "FFprobeInspector",
    "MediaInspector",
    "parse_audio_streams",
    "parse_geometry",
]
