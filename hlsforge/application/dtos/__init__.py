"""Data transfer objects for the application layer."""

from hlsforge.application.dtos.video import (
    BackfillFailure,
    BackfillReport,
    SweepReport,
    UploadedVideo,
    UploadVideoResponse,
    VideoStatusResponse,
)

__all__ = [
    # Upload
    "UploadedVideo",
    "UploadVideoResponse",
    "VideoStatusResponse",
    # Maintenance
    "BackfillFailure",
    "BackfillReport",
    "SweepReport",
]
