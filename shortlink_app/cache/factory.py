"""
Factory for creating cache instances.
"""

from enum import Enum
import logging

from .strategies import CacheStrategy, RedisCache, InMemoryCache, NullCache
from shortlink_app.config import Settings

logger = logging.getLogger(__name__)


class CacheBackend(Enum):
    """Available cache backends"""
    REDIS = "redis"
    MEMORY = "memory"
    NULL = "null"


class CacheFactory:
    """
    Builds the cache backend selected in settings.

    Called once from the application lifespan; the result is kept on
    ``app.state``. Redis is probed with PING using a short connect timeout.
    If it cannot be reached the service still starts, with a NullCache.
    """

    @classmethod
    async def create(cls, backend: CacheBackend, settings: Settings) -> CacheStrategy:
        """
        Args:
            backend: Type of cache backend (from enum)
            settings: Application settings (connection string, timeouts)

        Returns:
            A ready cache instance
        """
        if backend == CacheBackend.REDIS:
            import redis.asyncio as redis

            client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=settings.cache_connect_timeout,
                socket_timeout=settings.cache_socket_timeout,
            )
            try:
                await client.ping()
            except Exception as e:
                logger.warning(
                    "Redis connection to %s failed (%s); running without cache",
                    settings.redis_url, e,
                )
                await client.aclose()
                return NullCache()

            logger.info("Redis cache initialized (%s)", settings.redis_url)
            return RedisCache(client)

        if backend == CacheBackend.MEMORY:
            logger.info("In-memory cache initialized")
            return InMemoryCache()

        if backend == CacheBackend.NULL:
            logger.info("Cache disabled")
            return NullCache()

        raise ValueError(f"Unknown cache backend: {backend}")
