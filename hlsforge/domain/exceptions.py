"""Domain exceptions for the HLS ingestion pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hlsforge.domain.models.video import VideoStatus


class DomainException(Exception):
    """Base exception for domain errors."""


class DuplicateAssetException(DomainException):
    """Raised when an upload matches an asset that is already playable."""

    def __init__(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint
        super().__init__(f"Video already exists: {fingerprint}")


class StorageException(DomainException):
    """Raised when a filesystem operation on asset storage fails."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Storage operation failed for {path}: {reason}")


class ProbeException(DomainException):
    """Raised when the media probe errors or returns unusable output."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Probe failed for {path}: {reason}")


class EncodeException(DomainException):
    """Raised when an encoder invocation fails."""

    def __init__(self, path: str, stage: str, reason: str) -> None:
        self.path = path
        self.stage = stage
        self.reason = reason
        super().__init__(f"Encode failed for {path} at {stage}: {reason}")


class PosterException(DomainException):
    """Raised when a poster frame cannot be produced."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Poster extraction failed for {source}: {reason}")


class RepositoryException(DomainException):
    """Raised when the video repository cannot complete an operation."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Repository {operation} failed: {reason}")


class VideoNotFoundException(DomainException):
    """Raised when a requested video is not found."""

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")


class VideoNotReadyException(DomainException):
    """Raised when playback is requested for a video that isn't processed."""

    def __init__(self, video_id: str, status: VideoStatus) -> None:
        self.video_id = video_id
        self.status = status
        super().__init__(
            f"Video {video_id} is not ready. Current status: {status.value}"
        )


class AssetFileNotFoundException(DomainException):
    """Raised when a playlist, segment or poster file is missing on disk."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Asset file not found: {path}")


class InvalidAssetPathException(DomainException):
    """Raised when a requested asset path escapes or doesn't fit the layout."""

    def __init__(self, path: str, reason: str = "Invalid path") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid asset path '{path}': {reason}")
