"""Video upload orchestration service."""

from hlsforge.application.dtos import UploadedVideo
from hlsforge.application.services.posters import PosterService
from hlsforge.application.services.worker_pool import TranscodeWorkerPool
from hlsforge.commons.telemetry import LogContext, get_logger
from hlsforge.domain.exceptions import (
    DuplicateAssetException,
    RepositoryException,
    VideoNotFoundException,
)
from hlsforge.domain.models import TranscodeTask, VideoAsset, VideoStatus
from hlsforge.domain.value_objects import Fingerprint
from hlsforge.infrastructure.repository import VideoRepositoryBase
from hlsforge.infrastructure.storage import LocalVideoStorage
from hlsforge.infrastructure.video.base import MediaProbeBase


class VideoIngestionService:
    """Accepts uploads and hands them to the transcode workers.

    Synchronous phase:
    1. Fingerprint the upload and reject duplicates
    2. Store the file in its fingerprint directory
    3. Probe the duration
    4. Extract the upload-time poster
    5. Insert the video row (status processing)
    6. Queue the transcode task, waiting if the queue is full

    Nothing is inserted unless steps 1-4 succeed. A stored upload left
    behind by a later failure is removed by the orphan sweep.
    """

    def __init__(
        self,
        repository: VideoRepositoryBase,
        storage: LocalVideoStorage,
        probe: MediaProbeBase,
        posters: PosterService,
        worker_pool: TranscodeWorkerPool,
    ) -> None:
        """Initialize ingestion service with dependencies.

        Args:
            repository: Video repository.
            storage: Asset directory storage.
            probe: Media probe for the source duration.
            posters: Poster extraction service.
            worker_pool: Queue receiving transcode tasks.
        """
        self._repository = repository
        self._storage = storage
        self._probe = probe
        self._posters = posters
        self._pool = worker_pool
        self._logger = get_logger(__name__)

    async def upload(self, upload: UploadedVideo) -> VideoAsset:
        """Ingest an uploaded file.

        Returns once the transcode task is queued; the video is still
        processing at that point.

        Args:
            upload: File received from the client.

        Returns:
            The stored video row.

        Raises:
            DuplicateAssetException: If the same upload is already playable.
            StorageException: If the file cannot be stored.
            ProbeException: If the duration cannot be read.
            PosterException: If the poster frame cannot be extracted.
            RepositoryException: If the row cannot be inserted.
        """
        fingerprint = Fingerprint.from_upload(upload.filename, upload.size).value

        with LogContext(fingerprint=fingerprint):
            self._logger.info(
                "Upload received",
                extra={"upload_name": upload.filename, "size_bytes": upload.size},
            )

            if await self.is_duplicate(fingerprint):
                self._logger.info("Duplicate upload rejected")
                raise DuplicateAssetException(fingerprint)

            source = await self._storage.save_upload(
                fingerprint, upload.filename, upload.file
            )
            duration = await self._probe.get_duration(source)
            poster = await self._posters.extract_poster(source, duration)

            asset = await self._repository.create(
                VideoAsset(
                    fingerprint=fingerprint,
                    duration_seconds=duration,
                    poster=poster,
                )
            )
            if asset.id is None:
                raise RepositoryException("create", "no id assigned")

            await self._pool.submit(
                TranscodeTask(
                    upload_dir=self._storage.asset_dir(fingerprint),
                    video_id=asset.id,
                    source_path=source,
                    fingerprint=fingerprint,
                )
            )

            self._logger.info(
                "Upload accepted",
                extra={
                    "video_id": asset.id,
                    "public_id": asset.public_id,
                    "duration_seconds": duration,
                },
            )
            return asset

    async def is_duplicate(self, fingerprint: str) -> bool:
        """Check whether a playable asset already exists for a fingerprint.

        Both a repository row and the master playlist on disk are required;
        either alone means an earlier attempt never completed.
        """
        if not await self._repository.exists_by_fingerprint(fingerprint):
            return False
        return await self._storage.exists(
            self._storage.master_playlist_path(fingerprint)
        )

    async def get_video(self, public_id: str) -> VideoAsset:
        """Get a video by public id.

        Raises:
            VideoNotFoundException: If no video has this id.
        """
        asset = await self._repository.get_by_public_id(public_id)
        if asset is None:
            raise VideoNotFoundException(public_id)
        return asset

    async def list_videos(self, status: VideoStatus | None = None) -> list[VideoAsset]:
        """List videos, optionally only those in one status."""
        filters = {"status": status} if status else None
        return await self._repository.list_all(filters)

    async def delete_video(self, public_id: str) -> bool:
        """Delete a video row and its asset directory.

        The directory stays when another row still uses the fingerprint.

        Returns:
            True if deleted, False if not found.
        """
        asset = await self._repository.get_by_public_id(public_id)
        if asset is None or asset.id is None:
            self._logger.info(
                "Video not found for deletion",
                extra={"public_id": public_id},
            )
            return False

        await self._repository.delete(asset.id)

        if await self._repository.exists_by_fingerprint(asset.fingerprint):
            self._logger.info(
                "Asset directory still referenced, keeping it",
                extra={"video_id": asset.id, "fingerprint": asset.fingerprint},
            )
        else:
            try:
                await self._storage.remove_asset_dir(asset.fingerprint)
            except Exception as e:
                self._logger.warning(
                    "Failed to remove asset directory",
                    extra={
                        "video_id": asset.id,
                        "fingerprint": asset.fingerprint,
                        "error": str(e),
                    },
                )

        self._logger.info(
            "Video deleted",
            extra={"video_id": asset.id, "public_id": public_id},
        )
        return True
