"""Poster image endpoint."""

from fastapi import APIRouter, Response

from hlsforge.api.dependencies import PlaybackServiceDep
from hlsforge.application.services.playback import POSTER_MEDIA_TYPE

router = APIRouter()


@router.get(
    "/posters/{public_id}",
    summary="Video poster",
    description="Poster image of a video.",
    response_class=Response,
)
async def get_poster(
    public_id: str,
    service: PlaybackServiceDep,
) -> Response:
    content = await service.get_poster(public_id)
    return Response(content=content, media_type=POSTER_MEDIA_TYPE)
