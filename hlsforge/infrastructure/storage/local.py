"""Local filesystem storage for asset directories."""

import asyncio
import os
import shutil
import time
from pathlib import Path
from typing import BinaryIO

from hlsforge.commons.infrastructure.documentdb import HealthStatus
from hlsforge.commons.telemetry import get_logger
from hlsforge.domain.exceptions import (
    AssetFileNotFoundException,
    InvalidAssetPathException,
    StorageException,
)
from hlsforge.domain.value_objects import MASTER_PLAYLIST_NAME

COPY_CHUNK_SIZE = 1024 * 1024


class LocalVideoStorage:
    """Fingerprint-addressed asset directories on local disk.

    Layout: ``<root>/<video_path>/<fingerprint>/`` holding the source upload,
    the renditions, the master playlist and the poster.
    """

    def __init__(self, root_path: Path, video_path: str = "videos") -> None:
        """Initialize storage.

        Args:
            root_path: Storage root directory.
            video_path: Sub-path under the root holding asset directories.
        """
        self._videos_dir = Path(root_path) / video_path
        self._logger = get_logger(__name__)

    @property
    def videos_dir(self) -> Path:
        return self._videos_dir

    def asset_dir(self, fingerprint: str) -> Path:
        return self._videos_dir / fingerprint

    def master_playlist_path(self, fingerprint: str) -> Path:
        return self.asset_dir(fingerprint) / MASTER_PLAYLIST_NAME

    def resolve(self, fingerprint: str, name: str) -> Path:
        """Path of a file inside an asset directory.

        Raises:
            InvalidAssetPathException: If ``name`` is not a plain filename.
        """
        if not name or name != Path(name).name or name in (".", ".."):
            raise InvalidAssetPathException(f"{fingerprint}/{name}", "Not a filename")
        return self.asset_dir(fingerprint) / name

    async def save_upload(
        self,
        fingerprint: str,
        filename: str,
        data: BinaryIO,
    ) -> Path:
        """Write an uploaded file into its asset directory.

        The directory is created if absent. Only the base name of
        ``filename`` is used.

        Returns:
            Path of the stored file.

        Raises:
            StorageException: On any filesystem error.
        """
        target_dir = self.asset_dir(fingerprint)
        target = target_dir / (Path(filename).name or "source")
        loop = asyncio.get_event_loop()

        def _save() -> None:
            target_dir.mkdir(parents=True, exist_ok=True)
            data.seek(0)
            with target.open("wb") as out:
                shutil.copyfileobj(data, out, COPY_CHUNK_SIZE)

        try:
            await loop.run_in_executor(None, _save)
        except OSError as e:
            raise StorageException(str(target), str(e)) from e

        self._logger.debug("Stored upload", extra={"path": str(target)})
        return target

    async def exists(self, path: Path) -> bool:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, path.is_file)

    async def read_bytes(self, path: Path) -> bytes:
        """Read a whole file.

        Raises:
            AssetFileNotFoundException: If the file does not exist.
            StorageException: On other filesystem errors.
        """
        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, path.read_bytes)
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise AssetFileNotFoundException(str(path)) from e
        except OSError as e:
            raise StorageException(str(path), str(e)) from e

    async def read_text(self, path: Path) -> str:
        data = await self.read_bytes(path)
        return data.decode("utf-8")

    async def write_text(self, path: Path, content: str) -> None:
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(
                None, lambda: path.write_text(content, encoding="utf-8")
            )
        except OSError as e:
            raise StorageException(str(path), str(e)) from e

    async def remove_file(self, path: Path) -> bool:
        """Delete a file.

        Returns:
            True if deleted, False if it did not exist.
        """
        loop = asyncio.get_event_loop()

        def _remove() -> bool:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            return True

        try:
            return await loop.run_in_executor(None, _remove)
        except OSError as e:
            raise StorageException(str(path), str(e)) from e

    async def remove_asset_dir(self, fingerprint: str) -> bool:
        """Recursively delete an asset directory.

        Returns:
            True if deleted, False if it did not exist.
        """
        target = self.asset_dir(fingerprint)
        loop = asyncio.get_event_loop()

        def _rmtree() -> bool:
            if not target.exists():
                return False
            shutil.rmtree(target)
            return True

        try:
            return await loop.run_in_executor(None, _rmtree)
        except OSError as e:
            raise StorageException(str(target), str(e)) from e

    async def list_asset_dirs(self) -> list[str]:
        """Names of all asset directories on disk, sorted."""
        loop = asyncio.get_event_loop()

        def _list() -> list[str]:
            if not self._videos_dir.exists():
                return []
            return sorted(p.name for p in self._videos_dir.iterdir() if p.is_dir())

        try:
            return await loop.run_in_executor(None, _list)
        except OSError as e:
            raise StorageException(str(self._videos_dir), str(e)) from e

    async def health_check(self) -> HealthStatus:
        start = time.perf_counter()
        loop = asyncio.get_event_loop()

        def _check() -> bool:
            self._videos_dir.mkdir(parents=True, exist_ok=True)
            return os.access(self._videos_dir, os.W_OK)

        try:
            writable = await loop.run_in_executor(None, _check)
        except OSError as e:
            writable = False
            message = f"Storage unavailable: {e}"
        else:
            message = "Storage is writable" if writable else "Storage is read-only"

        return HealthStatus(
            healthy=writable,
            latency_ms=(time.perf_counter() - start) * 1000,
            message=message,
            details={"path": str(self._videos_dir)},
        )
