"""Tests for DistributedLocksRepository."""

import asyncio
from unittest.mock import AsyncMock

from pymongo.errors import DuplicateKeyError

from teamsync.repositories.distributed_locks import DistributedLocksRepository
from tests.mocks.mongodb import create_mock_collection, create_mock_db


def _repo(**returns):
    collection = create_mock_collection(**returns)
    return DistributedLocksRepository(create_mock_db({"distributed_locks": collection})), collection


class TestAcquireLock:
    def test_acquired(self):
        repo, collection = _repo(find_one_and_update={"_id": "team:t-1", "holder": "h-1"})

        assert asyncio.run(repo.acquire_lock("team:t-1", "h-1", ttl_seconds=10)) is True

        query, update = collection.find_one_and_update.call_args.args
        assert query["_id"] == "team:t-1"
        assert {"expires_at": {"$exists": False}} in query["$or"]
        assert update["$set"]["holder"] == "h-1"
        assert collection.find_one_and_update.call_args.kwargs["upsert"] is True

    def test_held_by_someone_else(self):
        """The upsert collides with the live lock document."""
        repo, collection = _repo()
        collection.find_one_and_update = AsyncMock(side_effect=DuplicateKeyError("E11000"))
        assert asyncio.run(repo.acquire_lock("team:t-1", "h-2")) is False


class TestReleaseLock:
    def test_only_holder_releases(self):
        repo, collection = _repo(deleted_count=0)
        assert asyncio.run(repo.release_lock("team:t-1", "h-2")) is False
        collection.delete_one.assert_called_once_with({"_id": "team:t-1", "holder": "h-2"})


class TestCleanup:
    def test_removes_expired(self):
        repo, collection = _repo(deleted_count=4)
        assert asyncio.run(repo.cleanup_expired_locks()) == 4
        query = collection.delete_many.call_args.args[0]
        assert "$lt" in query["expires_at"]
