"""
Cache-aside coordinator for code -> target URL lookups.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from shortlink_app.cache.strategies import CacheStrategy
from shortlink_app.models.link import ShortLink

logger = logging.getLogger(__name__)


class LinkCache:
    """
    Resolves codes cache-first and keeps the cache warm.

    The cache is never authoritative. Every cache call is preceded by an
    ``available`` check and wrapped so that no cache exception leaves this
    class: a failed read is a miss, a failed write is a no-op. Errors from
    the durable store do propagate.
    """

    KEY_PREFIX = "url:"

    def __init__(self, cache: CacheStrategy, ttl: int):
        self.cache = cache
        self.ttl = ttl

    def _key(self, code: str) -> str:
        return f"{self.KEY_PREFIX}{code}"

    async def get(self, code: str) -> Optional[str]:
        """Cached target URL for ``code``, or None on miss or cache failure."""
        if not self.cache.available:
            return None
        try:
            value = await self.cache.get(self._key(code))
        except Exception as e:
            logger.warning("Failed to read cache for code %s: %s", code, e)
            return None
        return value or None

    async def store(self, code: str, target_url: str) -> None:
        """Write ``code -> target_url`` with the configured TTL (best effort)."""
        if not self.cache.available:
            return
        try:
            await self.cache.set(self._key(code), target_url, ttl=self.ttl)
        except Exception as e:
            logger.warning("Failed to cache URL for code %s: %s", code, e)

    async def resolve(self, db: AsyncSession, code: str) -> Optional[str]:
        """
        Get the target URL for ``code`` using the Cache-Aside pattern.

        Flow:
        1. Check cache first
        2. On miss, query the database
        3. Populate cache for next time
        4. Return target URL (None if no such code)
        """
        cached_url = await self.get(code)
        if cached_url:
            return cached_url

        result = await db.execute(
            select(ShortLink.target_url).where(ShortLink.code == code)
        )
        target_url = result.scalar_one_or_none()
        if target_url is None:
            return None

        await self.store(code, target_url)
        return target_url
