"""
Distributed Cache Service using Redis

Shared cache layer for all backend pods. Used for organizer aggregates,
which are expensive to compute and fine to serve slightly stale.

Key features:
- Automatic JSON serialization/deserialization
- TTL-based expiration
- Graceful fallback when Redis is unavailable
- Cache key prefixing for namespace isolation
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from teamsync.core.config import settings
from teamsync.core.metrics import cache_hits_total, cache_misses_total

logger = logging.getLogger(__name__)


class CacheService:
    """
    Distributed cache service using Redis.

    Every method degrades to a cache miss (or a no-op write) when Redis is
    unreachable, so callers never have to handle cache failures.
    """

    def __init__(self, redis_url: Optional[str] = None):
        self._redis_url = redis_url or settings.REDIS_URL
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._available: bool = True
        self._lock: asyncio.Lock = asyncio.Lock()

    async def get_client(self) -> redis.Redis:
        """Get or create Redis client with connection pooling.

        Uses a lock to prevent race conditions when multiple coroutines
        try to initialize the client simultaneously.
        """
        if self._client is not None and self._pool is not None:
            return self._client

        async with self._lock:
            # Double-check after acquiring lock
            if self._client is not None and self._pool is not None:
                return self._client

            try:
                self._pool = ConnectionPool.from_url(
                    self._redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    max_connections=20,
                )
                self._client = redis.Redis(connection_pool=self._pool)
                # Test connection
                await self._client.ping()
                self._available = True
                logger.info("Redis cache connection established")
            except Exception as e:
                logger.warning(f"Redis connection failed: {e}. Cache will be disabled.")
                self._available = False
                raise
        return self._client

    async def close(self) -> None:
        """Close Redis connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None
        if self._pool:
            await self._pool.disconnect()
            self._pool = None

    def _make_key(self, key: str) -> str:
        """Create prefixed cache key."""
        return f"{settings.CACHE_PREFIX}{key}"

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key (will be prefixed automatically)

        Returns:
            Cached value or None if not found/expired
        """
        if not self._available:
            return None

        try:
            client = await self.get_client()
            data = await client.get(self._make_key(key))
            if data:
                return json.loads(data)
            return None
        except redis.ConnectionError:
            logger.warning("Redis connection lost, disabling cache temporarily")
            self._available = False
            return None
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to decode cached value for {key}: {e}")
            return None
        except Exception as e:
            logger.warning(f"Cache get error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        """
        Set value in cache with TTL.

        Args:
            key: Cache key (will be prefixed automatically)
            value: Value to cache (must be JSON serializable)
            ttl_seconds: Time-to-live in seconds (default from settings)

        Returns:
            True if cached successfully, False otherwise
        """
        if not self._available:
            return False

        if ttl_seconds is None:
            ttl_seconds = settings.CACHE_DEFAULT_TTL_HOURS * 3600

        try:
            client = await self.get_client()
            serialized = json.dumps(value, default=str)
            await client.setex(self._make_key(key), ttl_seconds, serialized)
            return True
        except redis.ConnectionError:
            logger.warning("Redis connection lost, disabling cache temporarily")
            self._available = False
            return False
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to serialize value for {key}: {e}")
            return False
        except Exception as e:
            logger.warning(f"Cache set error for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete a key from cache."""
        if not self._available:
            return False

        try:
            client = await self.get_client()
            await client.delete(self._make_key(key))
            return True
        except Exception as e:
            logger.warning(f"Cache delete error for {key}: {e}")
            return False

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        ttl_seconds: Optional[int] = None,
        cache_type: str = "default",
    ) -> Any:
        """
        Get from cache or fetch and cache if missing.

        Args:
            key: Cache key
            fetch_fn: Async function to call if cache miss
            ttl_seconds: TTL for cached value
            cache_type: Label for the hit/miss metrics

        Returns:
            Cached or freshly fetched value
        """
        cached = await self.get(key)
        if cached is not None:
            cache_hits_total.labels(cache_type=cache_type).inc()
            return cached

        cache_misses_total.labels(cache_type=cache_type).inc()
        data = await fetch_fn()
        if data is not None:
            await self.set(key, data, ttl_seconds)
        return data

    async def health_check(self) -> Dict[str, Any]:
        """Get cache health status."""
        try:
            client = await self.get_client()
            await client.ping()
            return {"status": "healthy", "available": self._available}
        except Exception as e:
            return {
                "status": "unhealthy",
                "available": False,
                "error": str(e),
            }


# Global cache service instance
cache_service = CacheService()


class CacheKeys:
    """Cache key builders for consistent key naming."""

    @staticmethod
    def organizer_dashboard() -> str:
        return "organizer:dashboard"

    @staticmethod
    def skill_distribution() -> str:
        return "organizer:skill-distribution"
