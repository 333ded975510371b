"""HLS transcode pipeline."""

import asyncio
from pathlib import Path

from hlsforge.commons.telemetry import LogContext, get_logger, timed
from hlsforge.domain.models import TranscodeTask, VideoStatus
from hlsforge.domain.value_objects import ResolutionLadder
from hlsforge.infrastructure.repository import VideoRepositoryBase
from hlsforge.infrastructure.storage import LocalVideoStorage
from hlsforge.infrastructure.video.base import MediaEncoderBase, MediaProbeBase

# Codec names ffprobe reports for H.265 sources
HEVC_CODECS = frozenset({"hevc", "h265"})

logger = get_logger(__name__)


class TranscodeService:
    """Turns an uploaded source into an HLS rendition ladder.

    Pipeline for one task:
    1. Probe dimensions to pick the scale orientation
    2. Re-encode H.265 sources to H.264
    3. Encode each resolution, lowest first
    4. Remove the working source in the background
    5. Write the master playlist and mark the video processed

    Any failure marks the video failed and deletes its whole asset
    directory, including the poster written at upload time.
    """

    def __init__(
        self,
        probe: MediaProbeBase,
        encoder: MediaEncoderBase,
        storage: LocalVideoStorage,
        repository: VideoRepositoryBase,
        resolutions: list[str],
    ) -> None:
        """Initialize transcode service.

        Args:
            probe: Media probe for dimensions and codec.
            encoder: Encoder producing renditions.
            storage: Asset directory storage.
            repository: Video repository for status updates.
            resolutions: Configured resolution ladder, in any order.
        """
        self._probe = probe
        self._encoder = encoder
        self._storage = storage
        self._repository = repository
        self._ladder = ResolutionLadder(resolutions=resolutions)
        self._cleanup_tasks: set[asyncio.Task[None]] = set()

    @property
    def ladder(self) -> ResolutionLadder:
        return self._ladder

    async def transcode(self, task: TranscodeTask) -> None:
        """Run the full pipeline for one task.

        Raises:
            DomainException: Whatever stopped the pipeline, after the video
                has been marked failed and its directory removed.
        """
        with LogContext(video_id=task.video_id, fingerprint=task.fingerprint):
            try:
                await self._run(task)
            except Exception as e:
                logger.error(
                    "Transcode failed, cleaning up",
                    extra={"error": str(e), "error_type": type(e).__name__},
                )
                await self._mark_failed(task)
                raise

    @timed(label="transcode pipeline")
    async def _run(self, task: TranscodeTask) -> None:
        source = task.source_path

        dimensions = await self._probe.get_dimensions(source)
        codec = await self._probe.get_codec(source)
        logger.info(
            "Probed source",
            extra={
                "width": dimensions.width,
                "height": dimensions.height,
                "codec": codec,
            },
        )

        if codec.lower() in HEVC_CODECS:
            reencoded = await self._encoder.reencode_to_h264(source, task.upload_dir)
            await self._storage.remove_file(source)
            source = reencoded

        for resolution in self._ladder.ascending():
            scale = self._ladder.scale_filter(
                resolution, dimensions.width, dimensions.height
            )
            logger.info(
                "Encoding rendition",
                extra={"resolution": resolution, "scale": scale},
            )
            await self._encoder.encode_rendition(
                source, task.upload_dir, resolution, scale
            )

        self._schedule_source_removal(source)

        await self._storage.write_text(
            self._storage.master_playlist_path(task.fingerprint),
            self._ladder.master_playlist(task.fingerprint),
        )
        await self._repository.update_status(task.video_id, VideoStatus.PROCESSED)
        logger.info(
            "Video processed",
            extra={"resolutions": ",".join(self._ladder.ascending())},
        )

    async def _mark_failed(self, task: TranscodeTask) -> None:
        try:
            await self._repository.update_status(task.video_id, VideoStatus.FAILED)
        except Exception as e:
            logger.error(
                "Failed to mark video as failed",
                extra={"error": str(e)},
            )

        # A scheduled source removal may still be touching the directory
        await self.aclose()
        try:
            await self._storage.remove_asset_dir(task.fingerprint)
        except Exception as e:
            logger.error(
                "Failed to remove asset directory",
                extra={"error": str(e)},
            )

    def _schedule_source_removal(self, source: Path) -> None:
        task = asyncio.create_task(self._remove_source(source))
        self._cleanup_tasks.add(task)
        task.add_done_callback(self._cleanup_tasks.discard)

    async def _remove_source(self, source: Path) -> None:
        try:
            await self._storage.remove_file(source)
        except Exception as e:
            logger.warning(
                "Failed to remove source after transcode",
                extra={"path": str(source), "error": str(e)},
            )

    async def aclose(self) -> None:
        """Wait for pending source removals."""
        if self._cleanup_tasks:
            await asyncio.gather(*self._cleanup_tasks, return_exceptions=True)
