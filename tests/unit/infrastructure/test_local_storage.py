"""Unit tests for local asset storage."""

import io

import pytest

from hlsforge.domain.exceptions import (
    AssetFileNotFoundException,
    InvalidAssetPathException,
)
from hlsforge.infrastructure.storage import LocalVideoStorage

FP = "d" * 64


@pytest.fixture
def storage(tmp_path):
    return LocalVideoStorage(root_path=tmp_path, video_path="videos")


class TestLayout:
    """Tests for path layout."""

    def test_paths(self, storage, tmp_path):
        assert storage.videos_dir == tmp_path / "videos"
        assert storage.asset_dir(FP) == tmp_path / "videos" / FP
        assert storage.master_playlist_path(FP) == tmp_path / "videos" / FP / (
            "playlist.m3u8"
        )

    def test_resolve_plain_name(self, storage, tmp_path):
        assert storage.resolve(FP, "720_001.ts") == tmp_path / "videos" / FP / (
            "720_001.ts"
        )

    @pytest.mark.parametrize("name", ["", ".", "..", "../x.ts", "sub/x.ts", "/etc/passwd"])
    def test_resolve_rejects_non_filenames(self, storage, name):
        with pytest.raises(InvalidAssetPathException):
            storage.resolve(FP, name)


class TestUploads:
    """Tests for storing uploads."""

    async def test_save_upload_creates_directory(self, storage):
        data = io.BytesIO(b"video-bytes")
        data.read()  # stream already consumed by size detection

        path = await storage.save_upload(FP, "clip.mp4", data)

        assert path == storage.asset_dir(FP) / "clip.mp4"
        assert path.read_bytes() == b"video-bytes"

    async def test_save_upload_strips_directories(self, storage):
        path = await storage.save_upload(FP, "../../evil.mp4", io.BytesIO(b"x"))
        assert path == storage.asset_dir(FP) / "evil.mp4"


class TestReadWrite:
    """Tests for reading and writing asset files."""

    async def test_write_then_read(self, storage):
        storage.asset_dir(FP).mkdir(parents=True)
        path = storage.master_playlist_path(FP)

        await storage.write_text(path, "#EXTM3U\n")

        assert await storage.exists(path)
        assert await storage.read_text(path) == "#EXTM3U\n"
        assert await storage.read_bytes(path) == b"#EXTM3U\n"

    async def test_read_missing(self, storage):
        with pytest.raises(AssetFileNotFoundException):
            await storage.read_bytes(storage.resolve(FP, "360.m3u8"))

    async def test_read_directory_is_not_found(self, storage):
        storage.asset_dir(FP).mkdir(parents=True)
        with pytest.raises(AssetFileNotFoundException):
            await storage.read_bytes(storage.asset_dir(FP))

    async def test_exists_false_for_missing(self, storage):
        assert not await storage.exists(storage.master_playlist_path(FP))


class TestRemoval:
    """Tests for file and directory removal."""

    async def test_remove_file(self, storage):
        path = await storage.save_upload(FP, "clip.mp4", io.BytesIO(b"x"))

        assert await storage.remove_file(path) is True
        assert not path.exists()
        assert await storage.remove_file(path) is False

    async def test_remove_asset_dir(self, storage):
        await storage.save_upload(FP, "clip.mp4", io.BytesIO(b"x"))

        assert await storage.remove_asset_dir(FP) is True
        assert not storage.asset_dir(FP).exists()
        assert await storage.remove_asset_dir(FP) is False


class TestListing:
    """Tests for listing asset directories."""

    async def test_missing_root(self, storage):
        assert await storage.list_asset_dirs() == []

    async def test_lists_directories_only(self, storage):
        for name in ("b" * 64, "a" * 64):
            storage.asset_dir(name).mkdir(parents=True)
        (storage.videos_dir / "stray.txt").write_text("x")

        assert await storage.list_asset_dirs() == ["a" * 64, "b" * 64]


class TestHealthCheck:
    """Tests for the storage health check."""

    async def test_writable_root(self, storage):
        status = await storage.health_check()

        assert status.healthy is True
        assert status.details["path"] == str(storage.videos_dir)
        assert storage.videos_dir.is_dir()
