"""Video asset domain model."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class VideoStatus(str, Enum):
    """Lifecycle status of an uploaded video."""

    PROCESSING = "processing"  # Row created, transcode queued or running
    PROCESSED = "processed"  # Master playlist written
    FAILED = "failed"  # Transcode aborted, directory removed


class VideoAsset(BaseModel):
    """An uploaded video and its HLS output.

    The fingerprint doubles as the name of the asset's storage directory.
    """

    id: int | None = Field(
        default=None,
        description="Numeric id, assigned by the repository on create",
    )
    public_id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Public UUID used by clients",
    )
    fingerprint: str = Field(description="Dedup key and directory name")
    duration_seconds: float = Field(ge=0, description="Source duration")
    poster: str | None = Field(
        default=None,
        description="Poster image filename inside the asset directory",
    )
    status: VideoStatus = Field(default=VideoStatus.PROCESSING)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_processed(self) -> bool:
        return self.status == VideoStatus.PROCESSED

    @property
    def has_poster(self) -> bool:
        return bool(self.poster)

