"""In-process generated-content cache."""
from collections import OrderedDict
from typing import Optional

from ..utils.logging import get_logger
from .base import GenerationCache

logger = get_logger(__name__)


class InMemoryCache(GenerationCache):
    """Process-local cache, lost on restart.

    Unbounded unless ``max_entries`` is given, in which case the least
    recently used entry is evicted once the cache is full.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, str]" = OrderedDict()

    async def get(self, key: str) -> Optional[str]:
        value = self._entries.get(key)
        if value is not None and self.max_entries:
            self._entries.move_to_end(key)
        return value

    async def set(self, key: str, value: str) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        if self.max_entries and len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("cache_evicted", key=evicted)

    async def size(self) -> int:
        return len(self._entries)

    async def clear(self) -> None:
        self._entries.clear()
