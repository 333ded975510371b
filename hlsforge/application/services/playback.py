"""Playback file resolution and orphan directory maintenance."""

from pathlib import PurePath

from hlsforge.application.dtos import SweepReport
from hlsforge.commons.telemetry import get_logger
from hlsforge.domain.exceptions import (
    AssetFileNotFoundException,
    InvalidAssetPathException,
    VideoNotFoundException,
    VideoNotReadyException,
)
from hlsforge.domain.models import VideoAsset
from hlsforge.domain.value_objects import Fingerprint
from hlsforge.infrastructure.repository import VideoRepositoryBase
from hlsforge.infrastructure.storage import LocalVideoStorage

# Files clients may fetch from an asset directory
MEDIA_TYPES = {
    ".m3u8": "application/vnd.apple.mpegurl",
    ".ts": "video/mp2t",
}
POSTER_MEDIA_TYPE = "image/jpeg"


def media_type_for(filename: str) -> str:
    """Content type of a stream file, by extension."""
    return MEDIA_TYPES.get(PurePath(filename).suffix.lower(), "application/octet-stream")


class PlaybackService:
    """Maps playback requests to bytes on disk."""

    def __init__(
        self,
        repository: VideoRepositoryBase,
        storage: LocalVideoStorage,
    ) -> None:
        self._repository = repository
        self._storage = storage
        self._logger = get_logger(__name__)

    async def get_master_playlist(self, public_id: str) -> bytes:
        """Master playlist of a processed video.

        Raises:
            VideoNotFoundException: If no video has this id.
            VideoNotReadyException: If the video is not processed.
            AssetFileNotFoundException: If the playlist is missing on disk.
        """
        asset = await self._get_asset(public_id)
        if not asset.is_processed:
            raise VideoNotReadyException(public_id, asset.status)
        return await self._storage.read_bytes(
            self._storage.master_playlist_path(asset.fingerprint)
        )

    async def get_stream_file(self, fingerprint: str, filename: str) -> bytes:
        """A media playlist or segment, e.g. ``<fp>/720.m3u8`` or ``<fp>/720_003.ts``.

        Raises:
            InvalidAssetPathException: If the path doesn't name a stream file.
            AssetFileNotFoundException: If the file does not exist.
        """
        path = f"{fingerprint}/{filename}"
        if not Fingerprint.is_valid(fingerprint):
            raise InvalidAssetPathException(path, "Unknown asset directory")
        if PurePath(filename).suffix.lower() not in MEDIA_TYPES:
            raise InvalidAssetPathException(path, "Not a playlist or segment")
        return await self._storage.read_bytes(
            self._storage.resolve(fingerprint, filename)
        )

    async def get_poster(self, public_id: str) -> bytes:
        """Poster image of a video.

        Raises:
            VideoNotFoundException: If no video has this id.
            AssetFileNotFoundException: If the video has no poster file.
        """
        asset = await self._get_asset(public_id)
        if not asset.has_poster:
            raise AssetFileNotFoundException(f"{asset.fingerprint}/<poster>")
        return await self._storage.read_bytes(
            self._storage.resolve(asset.fingerprint, asset.poster)
        )

    async def find_orphans(self) -> tuple[list[str], int]:
        """Asset directories no video row refers to.

        Returns:
            The orphaned directory names and the number of directories scanned.
        """
        known = {asset.fingerprint for asset in await self._repository.list_all()}
        on_disk = await self._storage.list_asset_dirs()
        return [name for name in on_disk if name not in known], len(on_disk)

    async def sweep_orphans(self) -> SweepReport:
        """Delete asset directories that no video row refers to."""
        orphans, scanned = await self.find_orphans()
        report = SweepReport(scanned=scanned)

        for name in orphans:
            try:
                await self._storage.remove_asset_dir(name)
            except Exception as e:
                self._logger.error(
                    "Failed to remove orphaned directory",
                    extra={"fingerprint": name, "error": str(e)},
                )
                report.failed.append(name)
            else:
                report.removed.append(name)

        self._logger.info(
            "Orphan sweep finished",
            extra={
                "scanned": report.scanned,
                "removed": len(report.removed),
                "failed": len(report.failed),
            },
        )
        return report

    async def _get_asset(self, public_id: str) -> VideoAsset:
        asset = await self._repository.get_by_public_id(public_id)
        if asset is None:
            raise VideoNotFoundException(public_id)
        return asset
