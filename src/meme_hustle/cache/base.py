"""Base interface for the generated-content cache."""
import json
from abc import ABC, abstractmethod
from typing import Optional, Sequence


def caption_key(title: str, tags: Sequence[str]) -> str:
    """Fingerprint for a caption: title plus tags, in order."""
    return "caption:" + json.dumps([title, list(tags)])


def vibe_key(tags: Sequence[str]) -> str:
    """Fingerprint for a vibe: tags only, in order."""
    return "vibe:" + json.dumps(list(tags))


class GenerationCache(ABC):
    """Memoizes generated text by fingerprint."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get a value from the cache.

        Args:
            key: Cache key

        Returns:
            Cached text or None if not found
        """

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value in the cache.

        Args:
            key: Cache key
            value: Generated text
        """

    @abstractmethod
    async def size(self) -> int:
        """Number of cached entries."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry."""

    async def close(self) -> None:
        """Release any connection held by the cache."""
