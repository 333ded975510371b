"""Transcode task value object."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class TranscodeTask(BaseModel):
    """One unit of work for the worker pool.

    Lives only in memory: created once per upload, consumed once by a
    worker, lost if the process exits while it is still queued.
    """

    model_config = ConfigDict(frozen=True)

    upload_dir: Path = Field(description="Asset directory holding the source")
    video_id: int = Field(description="Numeric id of the VideoAsset row")
    source_path: Path = Field(description="Uploaded source file")
    fingerprint: str = Field(description="Public segment directory name")
