"""hlsladder - adaptive-bitrate HLS publishing for uploaded video."""

__version__ = "0.1.0"
