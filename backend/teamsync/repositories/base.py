"""
Base Repository Pattern

Provides a generic, type-safe base class for the collection repositories.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel

# Type variable for the model class
T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        T: The Pydantic model class this repository manages

    Usage:
        class ParticipantRepository(BaseRepository[Participant]):
            collection_name = "participants"
            model_class = Participant
    """

    # Subclasses must define these
    collection_name: str
    model_class: Type[T]

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection: AsyncIOMotorCollection = db[self.collection_name]

    def _to_model(self, data: Optional[Dict[str, Any]]) -> Optional[T]:
        """Convert a raw document to a model instance."""
        if data is None:
            return None
        return self.model_class(**data)

    def _to_model_list(self, docs: List[Dict[str, Any]]) -> List[T]:
        """Convert a list of raw documents to model instances."""
        return [self.model_class(**doc) for doc in docs]

    async def get_by_id(self, id: str) -> Optional[T]:
        """Get a document by ID and return as model instance."""
        data = await self.collection.find_one({"_id": id})
        return self._to_model(data)

    async def find_one(
        self,
        query: Dict[str, Any],
        projection: Optional[Dict[str, int]] = None,
    ) -> Optional[T]:
        """Find one document matching query and return as model instance."""
        data = await self.collection.find_one(query, projection)
        return self._to_model(data)

    async def find_many(
        self,
        query: Dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort: Optional[List[tuple]] = None,
    ) -> List[T]:
        """Find multiple documents and return as model instances (limit 0 means no limit)."""
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(limit or None)
        return self._to_model_list(docs)

    async def find_by_ids(self, ids: List[str]) -> List[T]:
        """Find documents by a list of IDs (order not preserved)."""
        if not ids:
            return []
        cursor = self.collection.find({"_id": {"$in": ids}})
        docs = await cursor.to_list(None)
        return self._to_model_list(docs)

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching query."""
        return await self.collection.count_documents(query or {})

    async def create(self, model: T) -> T:
        """Create a new document from a model instance."""
        await self.collection.insert_one(model.model_dump(by_alias=True))
        return model

    async def update(self, id: str, update_data: Dict[str, Any]) -> Optional[T]:
        """Update a document by ID and return the updated model."""
        if update_data:
            await self.collection.update_one({"_id": id}, {"$set": update_data})
        return await self.get_by_id(id)

    async def update_many(self, query: Dict[str, Any], update_data: Dict[str, Any]) -> int:
        """Update multiple documents matching query."""
        result = await self.collection.update_many(query, {"$set": update_data})
        return result.modified_count

    async def delete_many(self, query: Dict[str, Any]) -> int:
        """Delete multiple documents matching query."""
        result = await self.collection.delete_many(query)
        return result.deleted_count

    async def aggregate(self, pipeline: List[Dict[str, Any]], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Run an aggregation pipeline."""
        return await self.collection.aggregate(pipeline).to_list(limit)
