"""Mock MongoDB objects for testing repository logic without a real database."""

from unittest.mock import AsyncMock, MagicMock


def create_mock_collection(**method_returns):
    """Create a mock MongoDB collection with AsyncMock methods.

    Args:
        **method_returns: Override default return values.
            Supported keys: find_one, find (list), count_documents (int),
            modified_count (int), matched_count (int), deleted_count (int),
            find_one_and_update, aggregate (list).
    """
    modified = method_returns.get("modified_count", 1)
    matched = method_returns.get("matched_count", modified)
    deleted = method_returns.get("deleted_count", 1)

    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=method_returns.get("find_one"))
    collection.insert_one = AsyncMock(
        return_value=MagicMock(inserted_id="mock-id")
    )
    collection.update_one = AsyncMock(
        return_value=MagicMock(modified_count=modified, matched_count=matched)
    )
    collection.update_many = AsyncMock(
        return_value=MagicMock(modified_count=modified, matched_count=matched)
    )
    collection.delete_one = AsyncMock(
        return_value=MagicMock(deleted_count=deleted)
    )
    collection.delete_many = AsyncMock(
        return_value=MagicMock(deleted_count=deleted)
    )
    collection.count_documents = AsyncMock(
        return_value=method_returns.get("count_documents", 0)
    )
    collection.find_one_and_update = AsyncMock(
        return_value=method_returns.get("find_one_and_update")
    )

    # find() returns a chainable cursor mock
    cursor = MagicMock()
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=method_returns.get("find", []))
    collection.find = MagicMock(return_value=cursor)

    aggregate_cursor = MagicMock()
    aggregate_cursor.to_list = AsyncMock(return_value=method_returns.get("aggregate", []))
    collection.aggregate = MagicMock(return_value=aggregate_cursor)

    return collection


def create_mock_db(collection_map=None):
    """Create a mock database with named collections.

    Collections are reachable both as attributes and by subscript.
    """
    db = MagicMock()
    collections = dict(collection_map or {})
    for name, coll in collections.items():
        setattr(db, name, coll)
    db.__getitem__.side_effect = lambda name: collections.setdefault(name, create_mock_collection())
    return db
