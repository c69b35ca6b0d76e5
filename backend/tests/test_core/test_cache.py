"""Tests for the cache service degradation and key builders."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import redis.asyncio as redis

from teamsync.core.cache import CacheKeys, CacheService


def _service_with_client(client):
    service = CacheService(redis_url="redis://cache.invalid:6379/0")
    service.get_client = AsyncMock(return_value=client)
    return service


class TestCacheKeys:
    def test_organizer_keys_are_distinct(self):
        assert CacheKeys.organizer_dashboard() != CacheKeys.skill_distribution()
        assert CacheKeys.organizer_dashboard().startswith("organizer:")


class TestGetSet:
    def test_round_trip_is_json(self):
        client = MagicMock()
        client.setex = AsyncMock()
        client.get = AsyncMock(return_value='{"total": 3}')
        service = _service_with_client(client)

        assert asyncio.run(service.set("k", {"total": 3}, ttl_seconds=60)) is True
        key, ttl, payload = client.setex.call_args.args
        assert key == "ts:k"
        assert ttl == 60
        assert payload == '{"total": 3}'
        assert asyncio.run(service.get("k")) == {"total": 3}

    def test_connection_loss_disables_cache(self):
        client = MagicMock()
        client.get = AsyncMock(side_effect=redis.ConnectionError("gone"))
        service = _service_with_client(client)

        assert asyncio.run(service.get("k")) is None
        assert asyncio.run(service.set("k", 1)) is False
        client.get.assert_called_once()


class TestGetOrFetch:
    def test_miss_fetches_and_stores(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=None)
        client.setex = AsyncMock()
        service = _service_with_client(client)
        fetch = AsyncMock(return_value={"fresh": True})

        assert asyncio.run(service.get_or_fetch("k", fetch, ttl_seconds=30)) == {"fresh": True}
        fetch.assert_awaited_once()
        client.setex.assert_awaited_once()

    def test_hit_skips_fetch(self):
        client = MagicMock()
        client.get = AsyncMock(return_value='{"cached": true}')
        service = _service_with_client(client)
        fetch = AsyncMock()

        assert asyncio.run(service.get_or_fetch("k", fetch)) == {"cached": True}
        fetch.assert_not_called()

    def test_unavailable_redis_still_fetches(self):
        service = _service_with_client(MagicMock())
        service._available = False
        fetch = AsyncMock(return_value=[1, 2])
        assert asyncio.run(service.get_or_fetch("k", fetch)) == [1, 2]


class TestDelete:
    def test_deletes_prefixed_key(self):
        client = MagicMock()
        client.delete = AsyncMock()
        service = _service_with_client(client)
        assert asyncio.run(service.delete(CacheKeys.organizer_dashboard())) is True
        client.delete.assert_awaited_once_with("ts:organizer:dashboard")

    def test_error_is_reported_not_raised(self):
        client = MagicMock()
        client.delete = AsyncMock(side_effect=RuntimeError("boom"))
        assert asyncio.run(_service_with_client(client).delete("k")) is False
