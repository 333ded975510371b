"""Domain layer - business models and logic."""

from hlsforge.domain.exceptions import (
    AssetFileNotFoundException,
    DomainException,
    DuplicateAssetException,
    EncodeException,
    InvalidAssetPathException,
    PosterException,
    ProbeException,
    RepositoryException,
    StorageException,
    VideoNotFoundException,
    VideoNotReadyException,
)
from hlsforge.domain.models import TranscodeTask, VideoAsset, VideoStatus
from hlsforge.domain.value_objects import (
    Fingerprint,
    ResolutionLadder,
    SegmentLocation,
    locate_segment,
    poster_filename,
    poster_timestamp,
)

__all__ = [
    # Exceptions
    "DomainException",
    "DuplicateAssetException",
    "StorageException",
    "ProbeException",
    "EncodeException",
    "PosterException",
    "RepositoryException",
    "VideoNotFoundException",
    "VideoNotReadyException",
    "AssetFileNotFoundException",
    "InvalidAssetPathException",
    # Models
    "VideoAsset",
    "VideoStatus",
    "TranscodeTask",
    # Value objects
    "Fingerprint",
    "ResolutionLadder",
    "SegmentLocation",
    "locate_segment",
    "poster_timestamp",
    "poster_filename",
]
