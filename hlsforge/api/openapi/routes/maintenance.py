"""Maintenance job endpoints."""

from fastapi import APIRouter

from hlsforge.api.dependencies import PlaybackServiceDep, PosterServiceDep
from hlsforge.application.dtos import BackfillReport, SweepReport

router = APIRouter()


@router.post(
    "/maintenance/posters",
    response_model=BackfillReport,
    summary="Backfill posters",
    description=(
        "Extract posters for processed videos that have none, from their "
        "highest rendition. Failed videos are reported, not retried."
    ),
)
async def backfill_posters(service: PosterServiceDep) -> BackfillReport:
    return await service.backfill_posters()


@router.post(
    "/maintenance/sweep",
    response_model=SweepReport,
    summary="Sweep orphaned directories",
    description="Delete asset directories no video refers to.",
)
async def sweep_orphans(service: PlaybackServiceDep) -> SweepReport:
    return await service.sweep_orphans()
