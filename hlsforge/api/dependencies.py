"""FastAPI dependency injection for services and settings."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from hlsforge.application.services import (
    PlaybackService,
    PosterService,
    TranscodeService,
    TranscodeWorkerPool,
    VideoIngestionService,
)
from hlsforge.commons.settings.loader import get_settings as _load_settings
from hlsforge.commons.settings.models import Settings
from hlsforge.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


def get_infrastructure_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> InfrastructureFactory:
    """Get infrastructure factory with all providers."""
    return get_factory(settings)


def build_worker_pool(
    factory: InfrastructureFactory,
    settings: Settings,
) -> TranscodeWorkerPool:
    """Create a transcode worker pool (not started)."""
    transcoder = TranscodeService(
        probe=factory.get_media_probe(),
        encoder=factory.get_media_encoder(),
        storage=factory.get_video_storage(),
        repository=factory.get_video_repository(),
        resolutions=settings.transcode.resolutions,
    )
    return TranscodeWorkerPool(
        transcoder=transcoder,
        worker_count=settings.transcode.worker_count,
        queue_size=settings.transcode.queue_size,
    )


def build_poster_service(
    factory: InfrastructureFactory,
    settings: Settings,
) -> PosterService:
    return PosterService(
        encoder=factory.get_media_encoder(),
        storage=factory.get_video_storage(),
        repository=factory.get_video_repository(),
        resolutions=settings.transcode.resolutions,
    )


def build_playback_service(factory: InfrastructureFactory) -> PlaybackService:
    return PlaybackService(
        repository=factory.get_video_repository(),
        storage=factory.get_video_storage(),
    )


class _PoolHolder:
    """Holder for the worker pool singleton to avoid global statements."""

    instance: TranscodeWorkerPool | None = None


def get_worker_pool() -> TranscodeWorkerPool:
    """Get the running worker pool.

    Raises:
        RuntimeError: If services have not been initialized.
    """
    if _PoolHolder.instance is None:
        raise RuntimeError("Transcode worker pool is not running")
    return _PoolHolder.instance


def get_poster_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PosterService:
    return build_poster_service(factory, settings)


def get_playback_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
) -> PlaybackService:
    return build_playback_service(factory)


def get_ingestion_service(
    factory: Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)],
    posters: Annotated[PosterService, Depends(get_poster_service)],
    worker_pool: Annotated[TranscodeWorkerPool, Depends(get_worker_pool)],
) -> VideoIngestionService:
    """Get video ingestion service with all dependencies.

    Args:
        factory: Infrastructure factory.
        posters: Poster service for the upload-time poster.
        worker_pool: Running transcode worker pool.

    Returns:
        Configured video ingestion service.
    """
    return VideoIngestionService(
        repository=factory.get_video_repository(),
        storage=factory.get_video_storage(),
        probe=factory.get_media_probe(),
        posters=posters,
        worker_pool=worker_pool,
    )


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
FactoryDep = Annotated[InfrastructureFactory, Depends(get_infrastructure_factory)]
IngestionServiceDep = Annotated[VideoIngestionService, Depends(get_ingestion_service)]
PlaybackServiceDep = Annotated[PlaybackService, Depends(get_playback_service)]
PosterServiceDep = Annotated[PosterService, Depends(get_poster_service)]
WorkerPoolDep = Annotated[TranscodeWorkerPool, Depends(get_worker_pool)]


async def init_services(settings: Settings) -> None:
    """Initialize infrastructure and start the transcode workers.

    Args:
        settings: Application settings.
    """
    factory = get_factory(settings)

    # Pre-initialize critical services to fail fast
    factory.get_document_db()
    factory.get_video_storage()
    await factory.get_video_repository().ensure_indexes()

    pool = build_worker_pool(factory, settings)
    pool.start()
    _PoolHolder.instance = pool


async def shutdown_services() -> None:
    """Stop the workers and close infrastructure services."""
    try:
        if _PoolHolder.instance is not None:
            await _PoolHolder.instance.close()
        factory = get_factory()
        await factory.close_all()
    except ValueError:
        pass  # Factory not initialized
    finally:
        _PoolHolder.instance = None
        reset_factory()
        get_settings.cache_clear()
