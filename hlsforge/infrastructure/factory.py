"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from hlsforge.commons.infrastructure.documentdb import DocumentDBBase, MongoDBDocumentDB
from hlsforge.commons.settings.models import Settings
from hlsforge.commons.telemetry import get_logger
from hlsforge.infrastructure.repository import (
    DocumentVideoRepository,
    VideoRepositoryBase,
)
from hlsforge.infrastructure.storage import LocalVideoStorage
from hlsforge.infrastructure.video import (
    FFmpegMediaEncoder,
    FFprobeMediaProbe,
    MediaEncoderBase,
    MediaProbeBase,
)


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings and
    caches one instance of each.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}
        self._logger = get_logger(__name__)

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db

            if doc_settings.username and doc_settings.password:
                connection_string = (
                    f"mongodb://{doc_settings.username}:{doc_settings.password}"
                    f"@{doc_settings.host}:{doc_settings.port}"
                    f"/?authSource={doc_settings.auth_source}"
                )
            else:
                connection_string = f"mongodb://{doc_settings.host}:{doc_settings.port}"

            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=connection_string,
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_video_repository(self) -> VideoRepositoryBase:
        if "video_repository" not in self._instances:
            collections = self._settings.document_db.collections
            self._instances["video_repository"] = DocumentVideoRepository(
                document_db=self.get_document_db(),
                videos_collection=collections.videos,
                counters_collection=collections.counters,
            )
        return cast("VideoRepositoryBase", self._instances["video_repository"])

    def get_video_storage(self) -> LocalVideoStorage:
        if "video_storage" not in self._instances:
            storage_settings = self._settings.storage
            self._instances["video_storage"] = LocalVideoStorage(
                root_path=storage_settings.root_path,
                video_path=storage_settings.video_path,
            )
        return cast("LocalVideoStorage", self._instances["video_storage"])

    def get_media_probe(self) -> MediaProbeBase:
        if "media_probe" not in self._instances:
            self._instances["media_probe"] = FFprobeMediaProbe(
                ffprobe_path=self._settings.transcode.ffprobe_path,
            )
        return cast("MediaProbeBase", self._instances["media_probe"])

    def get_media_encoder(self) -> MediaEncoderBase:
        """Get media encoder instance.

        Returns:
            ffmpeg encoder configured with the transcode settings.
        """
        if "media_encoder" not in self._instances:
            transcode = self._settings.transcode
            self._instances["media_encoder"] = FFmpegMediaEncoder(
                ffmpeg_path=transcode.ffmpeg_path,
                segment_seconds=transcode.segment_seconds,
                preset=transcode.preset,
            )
        return cast("MediaEncoderBase", self._instances["media_encoder"])

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            if hasattr(instance, "close"):
                try:
                    close_result = instance.close()
                    if hasattr(close_result, "__await__"):
                        await close_result
                except Exception as e:
                    self._logger.warning(
                        f"Failed to close {name}: {e}",
                        extra={"service": name},
                    )
        self._instances.clear()


class _FactoryHolder:
    """Holder for the factory singleton to avoid global statements."""

    instance: InfrastructureFactory | None = None


def get_factory(settings: Settings | None = None) -> InfrastructureFactory:
    """Get or create the infrastructure factory singleton.

    Args:
        settings: Settings to use. Required on first call.

    Returns:
        Infrastructure factory instance.

    Raises:
        ValueError: If settings not provided on first call.
    """
    if _FactoryHolder.instance is None:
        if settings is None:
            raise ValueError("Settings required to initialize factory")
        _FactoryHolder.instance = InfrastructureFactory(settings)
    return _FactoryHolder.instance


def reset_factory() -> None:
    """Reset the factory singleton (for testing)."""
    _FactoryHolder.instance = None
