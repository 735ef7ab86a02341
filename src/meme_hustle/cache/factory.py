"""Cache construction from settings."""
from ..config.config import Settings
from ..utils.logging import get_logger
from .base import GenerationCache
from .memory import InMemoryCache
from .redis import RedisCache

logger = get_logger(__name__)


def build_cache(settings: Settings) -> GenerationCache:
    """Use Redis when ``REDIS_URL`` is configured, otherwise an in-process cache."""
    if settings.redis_url:
        return RedisCache.from_url(settings.redis_url)
    logger.info("using_in_memory_cache", max_entries=settings.generation_cache_max_entries)
    return InMemoryCache(max_entries=settings.generation_cache_max_entries)
