"""Media tool abstractions and ffmpeg implementations."""

from hlsforge.infrastructure.video.base import (
    ExtractedFrame,
    MediaEncoderBase,
    MediaProbeBase,
    VideoDimensions,
)
from hlsforge.infrastructure.video.ffmpeg_encoder import FFmpegMediaEncoder
from hlsforge.infrastructure.video.ffmpeg_probe import FFprobeMediaProbe

__all__ = [
    # Base classes
    "MediaProbeBase",
    "MediaEncoderBase",
    # Data classes
    "VideoDimensions",
    "ExtractedFrame",
    # Implementations
    "FFprobeMediaProbe",
    "FFmpegMediaEncoder",
]
