"""Redis-backed generated-content cache."""
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..utils.logging import get_logger
from .base import GenerationCache

logger = get_logger(__name__)


class RedisCache(GenerationCache):
    """Generated-content cache shared through Redis.

    Redis failures degrade to cache misses; generation still goes ahead.
    """

    def __init__(self, client: redis.Redis, prefix: str = "meme_hustle") -> None:
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "meme_hustle") -> "RedisCache":
        """Connect to Redis at ``url``."""
        logger.info("redis_cache_connecting", url=url)
        client = redis.from_url(url, encoding="utf-8", decode_responses=True)
        return cls(client, prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(self._key(key))
        except RedisError as e:
            logger.warning("redis_cache_get_failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: str) -> None:
        try:
            await self.client.set(self._key(key), value)
        except RedisError as e:
            logger.warning("redis_cache_set_failed", key=key, error=str(e))

    async def size(self) -> int:
        count = 0
        async for _ in self.client.scan_iter(match=f"{self.prefix}:*"):
            count += 1
        return count

    async def clear(self) -> None:
        keys = [key async for key in self.client.scan_iter(match=f"{self.prefix}:*")]
        if keys:
            await self.client.delete(*keys)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("redis_cache_closed")
