"""
Cache strategies using Strategy Pattern.
Allows switching between different cache backends (Redis, In-Memory, Null).

Strategies do not swallow errors; callers go through
``shortlink_app.services.link_cache.LinkCache``, which checks ``available``
before every operation and turns any failure into a miss or a no-op.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple
import time


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    All methods are async because cache operations involve I/O (network for Redis).
    """

    @property
    def available(self) -> bool:
        """Whether this backend can serve requests at all."""
        return True

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found
        """

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int) -> None:
        """
        Set value in cache with TTL (Time To Live).

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds
        """

    async def close(self) -> None:
        """Release backend resources."""


class RedisCache(CacheStrategy):
    """
    Redis cache implementation on top of ``redis.asyncio``.

    Shared across processes, entries expire server-side via SETEX semantics.
    """

    def __init__(self, redis_client):
        """
        Args:
            redis_client: ``redis.asyncio.Redis`` created with decode_responses=True
        """
        self.redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        return await self.redis.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        await self.redis.set(key, value, ex=ttl)

    async def close(self) -> None:
        await self.redis.aclose()


class InMemoryCache(CacheStrategy):
    """
    In-memory cache implementation using a Python dict.

    Per-process only and lost on restart. Expired entries are dropped lazily
    on read. Good for development and tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._cache: Dict[str, Tuple[str, float]] = {}
        self._clock = clock

    async def get(self, key: str) -> Optional[str]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._cache[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._cache[key] = (value, self._clock() + ttl)

    def __len__(self) -> int:
        return len(self._cache)


class NullCache(CacheStrategy):
    """
    Null Object Pattern - the "cache unavailable" state.

    Used when caching is disabled or when the configured backend could not
    be reached at startup. Reads always miss, writes do nothing.
    """

    @property
    def available(self) -> bool:
        return False

    async def get(self, key: str) -> Optional[str]:
        return None

    async def set(self, key: str, value: str, ttl: int) -> None:
        return None
