"""Poster frame extraction and backfill."""

from pathlib import Path

from hlsforge.application.dtos import BackfillFailure, BackfillReport
from hlsforge.commons.telemetry import LogContext, get_logger
from hlsforge.domain.exceptions import DomainException, PosterException
from hlsforge.domain.models import VideoAsset
from hlsforge.domain.value_objects import (
    ResolutionLadder,
    locate_segment,
    poster_filename,
    poster_timestamp,
)
from hlsforge.infrastructure.repository import VideoRepositoryBase
from hlsforge.infrastructure.storage import LocalVideoStorage
from hlsforge.infrastructure.video.base import MediaEncoderBase


class PosterService:
    """Produces poster images for videos.

    At upload time the frame comes from the raw source. The backfill job
    instead reads the highest rendition's segments, since the source is
    gone once a video is processed.
    """

    def __init__(
        self,
        encoder: MediaEncoderBase,
        storage: LocalVideoStorage,
        repository: VideoRepositoryBase,
        resolutions: list[str],
    ) -> None:
        self._encoder = encoder
        self._storage = storage
        self._repository = repository
        self._ladder = ResolutionLadder(resolutions=resolutions)
        self._logger = get_logger(__name__)

    async def extract_poster(self, source: Path, duration_seconds: float) -> str:
        """Grab the poster frame from a source file.

        The image is written next to the source.

        Args:
            source: Uploaded source file.
            duration_seconds: Probed duration of the source.

        Returns:
            Poster filename.

        Raises:
            PosterException: If the frame cannot be extracted.
        """
        timestamp = poster_timestamp(duration_seconds)
        name = poster_filename(timestamp)
        await self._encoder.extract_frame(source, timestamp, source.parent / name)
        self._logger.info(
            "Poster extracted",
            extra={"poster": name, "timestamp": timestamp},
        )
        return name

    async def backfill_posters(self) -> BackfillReport:
        """Give every processed video without a poster one.

        Each video is attempted once; failures are collected in the report
        and never retried.
        """
        candidates = await self._repository.list_processed_without_poster()
        report = BackfillReport(candidates=len(candidates))
        self._logger.info(
            "Poster backfill started",
            extra={"candidates": len(candidates)},
        )

        for asset in candidates:
            with LogContext(video_id=asset.id, fingerprint=asset.fingerprint):
                try:
                    await self.backfill_poster(asset)
                except DomainException as e:
                    self._logger.error(
                        "Poster backfill failed",
                        extra={"error": str(e)},
                    )
                    report.failures.append(
                        BackfillFailure(
                            video_id=asset.id or 0,
                            fingerprint=asset.fingerprint,
                            reason=str(e),
                        )
                    )
                else:
                    report.updated.append(asset.id or 0)

        self._logger.info(
            "Poster backfill finished",
            extra={
                "updated": len(report.updated),
                "failed": len(report.failures),
            },
        )
        return report

    async def backfill_poster(self, asset: VideoAsset) -> str:
        """Extract a poster for one processed video from its segments.

        Returns:
            Poster filename.

        Raises:
            PosterException: If no segment covers the poster timestamp.
            AssetFileNotFoundException: If the media playlist is missing.
        """
        if asset.id is None:
            raise PosterException(asset.fingerprint, "video has no id")

        timestamp = poster_timestamp(asset.duration_seconds)
        playlist_path = self._storage.resolve(
            asset.fingerprint, f"{self._ladder.highest()}.m3u8"
        )
        playlist = await self._storage.read_text(playlist_path)

        location = locate_segment(playlist, timestamp)
        if location is None:
            raise PosterException(
                str(playlist_path), f"no segment covers {timestamp:.2f}s"
            )

        segment = self._storage.resolve(asset.fingerprint, location.uri)
        # Named after the position in the video, not the offset in the segment
        name = poster_filename(timestamp)
        await self._encoder.extract_frame(
            segment,
            location.offset_seconds,
            self._storage.asset_dir(asset.fingerprint) / name,
        )
        await self._repository.update_poster(asset.id, name)

        self._logger.info(
            "Poster backfilled",
            extra={
                "poster": name,
                "segment": location.uri,
                "offset_seconds": location.offset_seconds,
            },
        )
        return name
