"""
Caching utilities using Redis.
"""

import json
from typing import Optional, Any
import redis.asyncio as aioredis
from loguru import logger

from app.core.config import Settings


def create_redis_client(settings: Settings) -> aioredis.Redis:
    """
    Create the Redis client.

    The socket timeouts keep a stalled store from holding up searches;
    a timed out call is treated the same as a cache miss.

    Returns:
        Redis client instance
    """
    return aioredis.from_url(
        settings.REDIS_URL,
        encoding="utf-8",
        decode_responses=False,  # We'll handle encoding ourselves
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    )


class CacheService:
    """Best-effort JSON cache on top of Redis. Errors are logged, never raised."""

    def __init__(self, client: Optional[aioredis.Redis]):
        self._client = client

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found, unreadable or the store is down
        """
        if self._client is None:
            return None
        try:
            data = await self._client.get(key)
            if data is None:
                return None
            return json.loads(data)
        except Exception as e:
            logger.warning(f"Cache get error for key {key}: {e}")
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None
    ) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds (None for no expiration)

        Returns:
            True if successful, False otherwise
        """
        if self._client is None:
            return False
        try:
            data = json.dumps(value)
            if ttl:
                await self._client.setex(key, ttl, data)
            else:
                await self._client.set(key, data)
            return True
        except Exception as e:
            logger.warning(f"Cache set error for key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """
        Delete key from cache.

        Args:
            key: Cache key to delete

        Returns:
            True if successful, False otherwise
        """
        if self._client is None:
            return False
        try:
            await self._client.delete(key)
            return True
        except Exception as e:
            logger.warning(f"Cache delete error for key {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a pattern.

        Uses SCAN rather than KEYS so large keyspaces don't block the server.

        Args:
            pattern: Pattern to match (e.g., "search:msg:*")

        Returns:
            Number of keys deleted
        """
        if self._client is None:
            return 0
        try:
            keys = []
            async for key in self._client.scan_iter(match=pattern):
                keys.append(key)

            if keys:
                return await self._client.delete(*keys)
            return 0
        except Exception as e:
            logger.warning(f"Cache delete pattern error for {pattern}: {e}")
            return 0

    async def ping(self) -> bool:
        """Check store connectivity."""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.warning(f"Cache ping failed: {e}")
            return False
