"""Video asset persistence."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pymongo.errors import PyMongoError

from hlsforge.commons.infrastructure.documentdb import DocumentDBBase
from hlsforge.domain.exceptions import RepositoryException, VideoNotFoundException
from hlsforge.domain.models import VideoAsset, VideoStatus

VIDEO_SEQUENCE = "videos"


class VideoRepositoryBase(ABC):
    """Reads and writes VideoAsset rows.

    The repository is the single source of truth for status transitions.
    """

    @abstractmethod
    async def create(self, asset: VideoAsset) -> VideoAsset:
        """Insert a new asset.

        Returns:
            The stored asset with its numeric id assigned.
        """

    @abstractmethod
    async def get_by_id(self, video_id: int) -> VideoAsset | None:
        """Get an asset by numeric id."""

    @abstractmethod
    async def get_by_public_id(self, public_id: str) -> VideoAsset | None:
        """Get an asset by public UUID."""

    @abstractmethod
    async def update_status(self, video_id: int, status: VideoStatus) -> None:
        """Set an asset's status.

        Raises:
            VideoNotFoundException: If no asset has this id.
        """

    @abstractmethod
    async def update_poster(self, video_id: int, poster: str) -> None:
        """Set an asset's poster filename.

        Raises:
            VideoNotFoundException: If no asset has this id.
        """

    @abstractmethod
    async def exists_by_fingerprint(self, fingerprint: str) -> bool:
        """Check whether any asset row carries this fingerprint."""

    @abstractmethod
    async def list_processed_without_poster(self) -> list[VideoAsset]:
        """Processed assets that have no poster yet."""

    @abstractmethod
    async def list_all(self, filters: dict[str, Any] | None = None) -> list[VideoAsset]:
        """All assets matching field equality filters."""

    @abstractmethod
    async def delete(self, video_id: int) -> bool:
        """Delete an asset row.

        Returns:
            True if deleted, False if not found.
        """

    @abstractmethod
    async def ensure_indexes(self) -> None:
        """Create the indexes the lookups rely on. Safe to call repeatedly."""


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as e:
        raise RepositoryException(operation, str(e)) from e


def _to_document(asset: VideoAsset) -> dict[str, Any]:
    doc = asset.model_dump(mode="json")
    doc["id"] = str(asset.id)
    return doc


def _to_asset(doc: dict[str, Any]) -> VideoAsset:
    data = dict(doc)
    data["id"] = int(data["id"])
    return VideoAsset.model_validate(data)


def _normalize_filters(filters: dict[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in filters.items():
        if key == "id":
            value = str(value)
        elif isinstance(value, Enum):
            value = value.value
        normalized["_id" if key == "id" else key] = value
    return normalized


class DocumentVideoRepository(VideoRepositoryBase):
    """VideoRepositoryBase on top of a document database.

    Numeric ids come from an atomic counter document; they are stored as
    the document key in string form.
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        videos_collection: str = "videos",
        counters_collection: str = "counters",
    ) -> None:
        self._db = document_db
        self._videos = videos_collection
        self._counters = counters_collection

    async def create(self, asset: VideoAsset) -> VideoAsset:
        with _translate_errors("create"):
            video_id = await self._db.next_sequence(self._counters, VIDEO_SEQUENCE)
            stored = asset.model_copy(update={"id": video_id})
            await self._db.insert(self._videos, _to_document(stored))
        return stored

    async def get_by_id(self, video_id: int) -> VideoAsset | None:
        with _translate_errors("get_by_id"):
            doc = await self._db.find_by_id(self._videos, str(video_id))
        return _to_asset(doc) if doc else None

    async def get_by_public_id(self, public_id: str) -> VideoAsset | None:
        with _translate_errors("get_by_public_id"):
            doc = await self._db.find_one(self._videos, {"public_id": public_id})
        return _to_asset(doc) if doc else None

    async def update_status(self, video_id: int, status: VideoStatus) -> None:
        await self._update(
            "update_status",
            video_id,
            {"status": status.value},
        )

    async def update_poster(self, video_id: int, poster: str) -> None:
        await self._update("update_poster", video_id, {"poster": poster})

    async def exists_by_fingerprint(self, fingerprint: str) -> bool:
        with _translate_errors("exists_by_fingerprint"):
            return await self._db.count(self._videos, {"fingerprint": fingerprint}) > 0

    async def list_processed_without_poster(self) -> list[VideoAsset]:
        with _translate_errors("list_processed_without_poster"):
            docs = await self._db.find(
                self._videos,
                {
                    "status": VideoStatus.PROCESSED.value,
                    "poster": {"$in": [None, ""]},
                },
                limit=0,
            )
        # _id holds the numeric id as a string; order numerically
        return sorted((_to_asset(doc) for doc in docs), key=lambda a: a.id or 0)

    async def list_all(self, filters: dict[str, Any] | None = None) -> list[VideoAsset]:
        with _translate_errors("list_all"):
            docs = await self._db.find(
                self._videos,
                _normalize_filters(filters or {}),
                limit=0,
            )
        return [_to_asset(doc) for doc in docs]

    async def delete(self, video_id: int) -> bool:
        with _translate_errors("delete"):
            return await self._db.delete(self._videos, str(video_id))

    async def ensure_indexes(self) -> None:
        with _translate_errors("ensure_indexes"):
            await self._db.create_index(
                self._videos, [("fingerprint", 1)], name="fingerprint"
            )
            await self._db.create_index(
                self._videos, [("status", 1), ("poster", 1)], name="status_poster"
            )
            await self._db.create_index(
                self._videos, [("public_id", 1)], unique=True, name="public_id"
            )

    async def _update(
        self,
        operation: str,
        video_id: int,
        updates: dict[str, Any],
    ) -> None:
        updates = {**updates, "updated_at": datetime.now(UTC).isoformat()}
        with _translate_errors(operation):
            matched = await self._db.update(self._videos, str(video_id), updates)
        if not matched:
            raise VideoNotFoundException(str(video_id))
