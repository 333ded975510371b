"""Video asset repositories."""

from hlsforge.infrastructure.repository.video_repository import (
    DocumentVideoRepository,
    VideoRepositoryBase,
)

__all__ = [
    "VideoRepositoryBase",
    "DocumentVideoRepository",
]
