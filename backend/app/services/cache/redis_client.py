"""
Redis cache client for derived chart data.

The candle series never changes after ingestion, so anything computed from it
can be cached under the load id and never invalidated.
Falls back to an in-process dictionary when Redis is unavailable.
"""

import json
import logging
from typing import Optional, Any

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

# Global Redis connection pool
_redis_pool: Optional[redis.Redis] = None


async def init_redis(redis_url: str) -> Optional[redis.Redis]:
    """
    Initialize Redis connection pool.
    Called on application startup.
    """
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    try:
        _redis_pool = redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        # Test connection
        await _redis_pool.ping()
        logger.info(f"Redis connected: {redis_url}")
        return _redis_pool
    except (RedisError, OSError) as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory fallback.")
        _redis_pool = None
        return None


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.aclose()
        _redis_pool = None
        logger.info("Redis connection closed")


class DerivedCache:
    """
    JSON cache for values derived from the immutable series.

    Keys:
    - {prefix}:indicators:{load_id} → JSON list of indicator points

    Entries carry no TTL: a new ingestion gets a new load id.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None, prefix: str = "chart"):
        self._redis = redis_client
        self._prefix = prefix
        # In-memory fallback when Redis is unavailable
        self._memory_cache: dict[str, str] = {}

    @property
    def redis(self) -> Optional[redis.Redis]:
        return self._redis

    @property
    def backend(self) -> str:
        return "redis" if self.redis else "memory"

    def key(self, *parts: str) -> str:
        return ":".join((self._prefix,) + parts)

    async def get_json(self, key: str) -> Optional[Any]:
        if self.redis:
            try:
                value = await self.redis.get(key)
                return json.loads(value) if value else None
            except RedisError as e:
                logger.debug(f"Redis get failed for {key}: {e}")

        # Fallback to memory
        value = self._memory_cache.get(key)
        return json.loads(value) if value else None

    async def set_json(self, key: str, data: Any) -> bool:
        value = json.dumps(data)

        if self.redis:
            try:
                await self.redis.set(key, value)
                return True
            except RedisError as e:
                logger.debug(f"Redis set failed for {key}: {e}")

        self._memory_cache[key] = value
        return True
