"""Unit tests for MongoDB document database provider."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo import ReturnDocument


class _FakeCursor:
    """Chainable async cursor over a fixed list of documents."""

    def __init__(self, docs):
        self._docs = list(docs)
        self.sort_args = None
        self.skip_args = None
        self.limit_args = None

    def sort(self, spec):
        self.sort_args = spec
        return self

    def skip(self, n):
        self.skip_args = n
        return self

    def limit(self, n):
        self.limit_args = n
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc


class TestMongoDBDocumentDB:
    """Tests for MongoDBDocumentDB provider.

    These tests verify the ID mapping between the domain ``id`` and
    MongoDB's ``_id`` field, and the counter used for numeric ids.
    """

    @pytest.fixture
    def mock_motor_client(self):
        """Create a mock Motor client."""
        with patch(
            "hlsforge.commons.infrastructure.documentdb.mongodb_provider.AsyncIOMotorClient"
        ) as mock_client_class:
            mock_client = MagicMock()
            mock_db = MagicMock()
            mock_collection = MagicMock()

            mock_client.__getitem__ = MagicMock(return_value=mock_db)
            mock_db.__getitem__ = MagicMock(return_value=mock_collection)

            mock_client_class.return_value = mock_client

            yield {
                "client_class": mock_client_class,
                "client": mock_client,
                "db": mock_db,
                "collection": mock_collection,
            }

    @pytest.fixture
    def mongodb_provider(self, mock_motor_client):
        """Create MongoDB provider with mocked client."""
        from hlsforge.commons.infrastructure.documentdb.mongodb_provider import (
            MongoDBDocumentDB,
        )

        return MongoDBDocumentDB(
            connection_string="mongodb://localhost:27017",
            database_name="test_db",
        )

    async def test_insert_uses_id_as_mongodb_id(
        self, mongodb_provider, mock_motor_client
    ):
        collection = mock_motor_client["collection"]
        collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="7"))

        result = await mongodb_provider.insert(
            "videos", {"id": "7", "fingerprint": "abc"}
        )

        stored = collection.insert_one.call_args.args[0]
        assert stored == {"_id": "7", "fingerprint": "abc"}
        assert result == "7"

    async def test_insert_does_not_mutate_input(
        self, mongodb_provider, mock_motor_client
    ):
        collection = mock_motor_client["collection"]
        collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id="1"))
        document = {"id": "1"}

        await mongodb_provider.insert("videos", document)

        assert document == {"id": "1"}

    async def test_find_by_id_maps_id_back(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        collection.find_one = AsyncMock(return_value={"_id": "3", "status": "processed"})

        doc = await mongodb_provider.find_by_id("videos", "3")

        collection.find_one.assert_called_once_with({"_id": "3"})
        assert doc == {"id": "3", "status": "processed"}

    async def test_find_by_id_missing(self, mongodb_provider, mock_motor_client):
        mock_motor_client["collection"].find_one = AsyncMock(return_value=None)

        assert await mongodb_provider.find_by_id("videos", "3") is None

    async def test_find_applies_sort_skip_limit(
        self, mongodb_provider, mock_motor_client
    ):
        cursor = _FakeCursor([{"_id": "1"}, {"_id": "2"}])
        mock_motor_client["collection"].find = MagicMock(return_value=cursor)

        docs = await mongodb_provider.find(
            "videos", {"status": "processed"}, skip=5, limit=0, sort=[("_id", 1)]
        )

        assert docs == [{"id": "1"}, {"id": "2"}]
        assert cursor.sort_args == [("_id", 1)]
        assert cursor.skip_args == 5
        assert cursor.limit_args == 0

    async def test_update_sets_fields(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        collection.update_one = AsyncMock(return_value=MagicMock(matched_count=1))

        updated = await mongodb_provider.update(
            "videos", "4", {"id": "4", "status": "failed"}
        )

        assert updated is True
        collection.update_one.assert_called_once_with(
            {"_id": "4"}, {"$set": {"status": "failed"}}
        )

    async def test_update_no_match(self, mongodb_provider, mock_motor_client):
        mock_motor_client["collection"].update_one = AsyncMock(
            return_value=MagicMock(matched_count=0)
        )

        assert await mongodb_provider.update("videos", "4", {"poster": "x"}) is False

    async def test_delete(self, mongodb_provider, mock_motor_client):
        mock_motor_client["collection"].delete_one = AsyncMock(
            return_value=MagicMock(deleted_count=1)
        )

        assert await mongodb_provider.delete("videos", "4") is True

    async def test_count_with_filters(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        collection.count_documents = AsyncMock(return_value=2)

        assert await mongodb_provider.count("videos", {"fingerprint": "abc"}) == 2
        collection.count_documents.assert_called_once_with({"fingerprint": "abc"})

    async def test_count_without_filters(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        collection.estimated_document_count = AsyncMock(return_value=9)

        assert await mongodb_provider.count("videos") == 9

    async def test_next_sequence_increments_counter(
        self, mongodb_provider, mock_motor_client
    ):
        collection = mock_motor_client["collection"]
        collection.find_one_and_update = AsyncMock(
            return_value={"_id": "videos", "seq": 12}
        )

        assert await mongodb_provider.next_sequence("counters", "videos") == 12

        collection.find_one_and_update.assert_called_once_with(
            {"_id": "videos"},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    async def test_health_check_healthy(self, mongodb_provider, mock_motor_client):
        mock_motor_client["client"].admin.command = AsyncMock(return_value={"ok": 1})

        status = await mongodb_provider.health_check()

        assert status.healthy is True
        assert status.details == {"database": "test_db"}

    async def test_health_check_unhealthy(self, mongodb_provider, mock_motor_client):
        mock_motor_client["client"].admin.command = AsyncMock(
            side_effect=ConnectionError("refused")
        )

        status = await mongodb_provider.health_check()

        assert status.healthy is False
        assert "refused" in status.message

    async def test_close(self, mongodb_provider, mock_motor_client):
        await mongodb_provider.close()
        mock_motor_client["client"].close.assert_called_once()

    async def test_create_index(self, mongodb_provider, mock_motor_client):
        collection = mock_motor_client["collection"]
        collection.create_index = AsyncMock(return_value="fingerprint")

        name = await mongodb_provider.create_index(
            "videos", [("fingerprint", 1)], name="fingerprint"
        )

        assert name == "fingerprint"
        mock_motor_client["db"].__getitem__.assert_called_with("videos")
        collection.create_index.assert_called_once_with(
            [("fingerprint", 1)], unique=False, name="fingerprint"
        )
