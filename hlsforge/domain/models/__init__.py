"""Domain models."""

from hlsforge.domain.models.task import TranscodeTask
from hlsforge.domain.models.video import VideoAsset, VideoStatus

__all__ = [
    "VideoAsset",
    "VideoStatus",
    "TranscodeTask",
]
