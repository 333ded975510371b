"""DTOs for video upload, playback and maintenance operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO

from pydantic import BaseModel, Field

from hlsforge.domain.models import VideoAsset, VideoStatus


@dataclass
class UploadedVideo:
    """A file received from a client, not yet stored.

    ``file`` must be readable and seekable.
    """

    filename: str
    size: int
    file: BinaryIO


class UploadVideoResponse(BaseModel):
    """Result of an accepted upload; transcoding continues in the background."""

    video_id: int = Field(description="Numeric video id")
    public_id: str = Field(description="Public UUID for status and playback")
    fingerprint: str = Field(description="Asset directory name")
    status: VideoStatus = Field(description="Always processing on acceptance")
    duration_seconds: float = Field(description="Probed source duration")
    poster: str | None = Field(default=None, description="Upload-time poster")

    @classmethod
    def from_asset(cls, asset: VideoAsset) -> "UploadVideoResponse":
        return cls(
            video_id=asset.id or 0,
            public_id=asset.public_id,
            fingerprint=asset.fingerprint,
            status=asset.status,
            duration_seconds=asset.duration_seconds,
            poster=asset.poster,
        )


class VideoStatusResponse(BaseModel):
    """Current state of a video, for polling clients."""

    public_id: str
    fingerprint: str
    status: VideoStatus
    duration_seconds: float
    poster: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_asset(cls, asset: VideoAsset) -> "VideoStatusResponse":
        return cls(
            public_id=asset.public_id,
            fingerprint=asset.fingerprint,
            status=asset.status,
            duration_seconds=asset.duration_seconds,
            poster=asset.poster,
            created_at=asset.created_at,
            updated_at=asset.updated_at,
        )


class BackfillFailure(BaseModel):
    """One asset the poster backfill could not fix."""

    video_id: int
    fingerprint: str
    reason: str


class BackfillReport(BaseModel):
    """Outcome of a poster backfill run."""

    candidates: int = Field(default=0, description="Assets without a poster")
    updated: list[int] = Field(
        default_factory=list, description="Video ids that got a poster"
    )
    failures: list[BackfillFailure] = Field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


class SweepReport(BaseModel):
    """Outcome of an orphan directory sweep."""

    scanned: int = Field(default=0, description="Asset directories on disk")
    removed: list[str] = Field(
        default_factory=list, description="Orphaned directories deleted"
    )
    failed: list[str] = Field(
        default_factory=list, description="Orphaned directories that resisted deletion"
    )

    @property
    def kept(self) -> int:
        return self.scanned - len(self.removed) - len(self.failed)
