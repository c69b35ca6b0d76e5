"""
Distributed Locks Repository

Manages distributed locks for multi-pod coordination.
Used to serialize membership changes on the same team across all API pods.
"""

from datetime import datetime, timedelta, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError


class DistributedLocksRepository:
    """Repository for distributed lock operations across multiple pods."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.distributed_locks

    async def acquire_lock(self, lock_name: str, holder_id: str, ttl_seconds: int = 30) -> bool:
        """
        Try to acquire a distributed lock atomically.

        Args:
            lock_name: Name of the lock
            holder_id: Identifier of the request acquiring the lock
            ttl_seconds: Lock TTL in seconds (auto-expires if holder crashes)

        Returns:
            True if lock acquired successfully, False if lock is held by another holder
        """
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=ttl_seconds)

        try:
            result = await self.collection.find_one_and_update(
                {
                    "_id": lock_name,
                    # Lock is available if it doesn't exist or has expired
                    "$or": [
                        {"expires_at": {"$exists": False}},
                        {"expires_at": {"$lt": now}},
                    ],
                },
                {
                    "$set": {
                        "acquired_at": now,
                        "expires_at": expires_at,
                        "holder": holder_id,
                    }
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # A live lock document exists, so the upsert collided with it
            return False

        return result is not None

    async def release_lock(self, lock_name: str, holder_id: str) -> bool:
        """
        Release a distributed lock held by ``holder_id``.

        Returns:
            True if lock was released, False if it was not held by this holder
        """
        result = await self.collection.delete_one({"_id": lock_name, "holder": holder_id})
        return result.deleted_count > 0

    async def cleanup_expired_locks(self) -> int:
        """
        Remove expired locks from the database.

        Returns:
            Number of expired locks removed
        """
        now = datetime.now(timezone.utc)
        result = await self.collection.delete_many({"expires_at": {"$lt": now}})
        return result.deleted_count
