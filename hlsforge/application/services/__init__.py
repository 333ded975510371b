"""Application services."""

from hlsforge.application.services.ingestion import VideoIngestionService
from hlsforge.application.services.playback import PlaybackService, media_type_for
from hlsforge.application.services.posters import PosterService
from hlsforge.application.services.transcode import TranscodeService
from hlsforge.application.services.worker_pool import TranscodeWorkerPool

__all__ = [
    "VideoIngestionService",
    "TranscodeService",
    "TranscodeWorkerPool",
    "PosterService",
    "PlaybackService",
    "media_type_for",
]
