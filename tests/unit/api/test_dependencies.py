"""Unit tests for service startup and shutdown."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hlsforge.api import dependencies
from hlsforge.commons.settings.models import Settings


@pytest.fixture
def factory():
    factory = MagicMock()
    factory.get_video_repository.return_value.ensure_indexes = AsyncMock()
    factory.close_all = AsyncMock()
    return factory


@pytest.fixture
def pool():
    pool = MagicMock()
    pool.close = AsyncMock()
    return pool


class TestInitServices:
    """Tests for init_services and shutdown_services."""

    async def test_creates_indexes_and_starts_workers(self, factory, pool):
        with (
            patch.object(dependencies, "get_factory", return_value=factory),
            patch.object(dependencies, "build_worker_pool", return_value=pool),
        ):
            await dependencies.init_services(Settings())

            factory.get_video_repository.return_value.ensure_indexes.assert_awaited_once()
            pool.start.assert_called_once()
            assert dependencies.get_worker_pool() is pool

            await dependencies.shutdown_services()

        pool.close.assert_awaited_once()
        factory.close_all.assert_awaited_once()
        with pytest.raises(RuntimeError):
            dependencies.get_worker_pool()

    async def test_index_failure_aborts_startup(self, factory, pool):
        factory.get_video_repository.return_value.ensure_indexes.side_effect = (
            RuntimeError("down")
        )

        with (
            patch.object(dependencies, "get_factory", return_value=factory),
            patch.object(dependencies, "build_worker_pool", return_value=pool),
            pytest.raises(RuntimeError),
        ):
            await dependencies.init_services(Settings())

        pool.start.assert_not_called()
