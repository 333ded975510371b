"""Video upload, status and playback endpoints."""

from typing import Annotated

from fastapi import APIRouter, File, Query, Response, UploadFile, status
from pydantic import BaseModel, Field

from hlsforge.api.dependencies import IngestionServiceDep, PlaybackServiceDep
from hlsforge.api.middleware.error_handler import APIError
from hlsforge.application.dtos import (
    UploadedVideo,
    UploadVideoResponse,
    VideoStatusResponse,
)
from hlsforge.application.services import media_type_for
from hlsforge.domain.models import VideoStatus
from hlsforge.domain.value_objects import MASTER_PLAYLIST_NAME

router = APIRouter()


class VideoListResponse(BaseModel):
    """Response for video listing."""

    videos: list[VideoStatusResponse] = Field(description="Matching videos")
    total: int = Field(ge=0, description="Number of videos returned")


class DeleteResponse(BaseModel):
    """Response for video deletion."""

    success: bool = Field(description="Whether deletion was successful")
    video_id: str = Field(description="Public id of deleted video")
    message: str = Field(description="Status message")


@router.post(
    "/videos",
    response_model=UploadVideoResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Upload a video",
    description=(
        "Store an uploaded video and queue it for HLS transcoding. "
        "Returns once the transcode is queued; poll the status endpoint."
    ),
)
async def upload_video(
    service: IngestionServiceDep,
    file: Annotated[UploadFile, File(description="Video file")],
) -> UploadVideoResponse:
    """Accept a multipart video upload."""
    if not file.filename:
        raise APIError(
            code="MISSING_FILENAME",
            message="Uploaded file has no filename",
        )

    size = file.size
    if size is None:
        file.file.seek(0, 2)
        size = file.file.tell()
        file.file.seek(0)

    asset = await service.upload(
        UploadedVideo(filename=file.filename, size=size, file=file.file)
    )
    return UploadVideoResponse.from_asset(asset)


@router.get(
    "/videos",
    response_model=VideoListResponse,
    summary="List videos",
    description="List videos, optionally filtered by status.",
)
async def list_videos(
    service: IngestionServiceDep,
    status_filter: Annotated[
        VideoStatus | None,
        Query(alias="status", description="processing, processed or failed"),
    ] = None,
) -> VideoListResponse:
    videos = await service.list_videos(status=status_filter)
    return VideoListResponse(
        videos=[VideoStatusResponse.from_asset(v) for v in videos],
        total=len(videos),
    )


@router.get(
    "/videos/{public_id}/status",
    response_model=VideoStatusResponse,
    summary="Video status",
    description="Current processing status of a video.",
)
async def get_video_status(
    public_id: str,
    service: IngestionServiceDep,
) -> VideoStatusResponse:
    asset = await service.get_video(public_id)
    return VideoStatusResponse.from_asset(asset)


@router.delete(
    "/videos/{public_id}",
    response_model=DeleteResponse,
    summary="Delete video",
    description="Delete a video row and its HLS output.",
)
async def delete_video(
    public_id: str,
    service: IngestionServiceDep,
) -> DeleteResponse:
    deleted = await service.delete_video(public_id)
    if not deleted:
        raise APIError(
            code="VIDEO_NOT_FOUND",
            message=f"Video {public_id} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"video_id": public_id},
        )
    return DeleteResponse(
        success=True,
        video_id=public_id,
        message="Video deleted",
    )


@router.get(
    "/videos/{public_id}",
    summary="Master playlist",
    description="HLS master playlist of a processed video.",
    response_class=Response,
)
async def get_master_playlist(
    public_id: str,
    service: PlaybackServiceDep,
) -> Response:
    content = await service.get_master_playlist(public_id)
    return Response(content=content, media_type=media_type_for(MASTER_PLAYLIST_NAME))


@router.get(
    "/videos/{fingerprint}/{filename}",
    summary="Stream file",
    description="A rendition playlist (<res>.m3u8) or segment (<res>_NNN.ts).",
    response_class=Response,
)
async def get_stream_file(
    fingerprint: str,
    filename: str,
    service: PlaybackServiceDep,
) -> Response:
    content = await service.get_stream_file(fingerprint, filename)
    return Response(content=content, media_type=media_type_for(filename))
