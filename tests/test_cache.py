"""Tests for the generated-content caches."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from meme_hustle.cache.base import caption_key, vibe_key
from meme_hustle.cache.factory import build_cache
from meme_hustle.cache.memory import InMemoryCache
from meme_hustle.cache.redis import RedisCache


def test_fingerprints() -> None:
    assert caption_key("Doge", ["crypto", "funny"]) == 'caption:["Doge", ["crypto", "funny"]]'
    assert vibe_key(["crypto", "funny"]) == 'vibe:["crypto", "funny"]'
    assert caption_key("Doge", ["funny", "crypto"]) != caption_key("Doge", ["crypto", "funny"])
    assert vibe_key([]) == "vibe:[]"


def test_fingerprints_keep_tag_boundaries() -> None:
    assert vibe_key(["b,c"]) != vibe_key(["b", "c"])
    assert caption_key("a:b", ["c"]) != caption_key("a", ["b:c"])
    assert caption_key("a", ["b,c"]) != caption_key("a", ["b", "c"])


@pytest.mark.asyncio
async def test_in_memory_unbounded() -> None:
    cache = InMemoryCache()
    for index in range(500):
        await cache.set(f"k{index}", str(index))

    assert await cache.size() == 500
    assert await cache.get("k0") == "0"
    assert await cache.get("missing") is None


@pytest.mark.asyncio
async def test_in_memory_lru_bound() -> None:
    cache = InMemoryCache(max_entries=2)
    await cache.set("a", "1")
    await cache.set("b", "2")
    await cache.get("a")
    await cache.set("c", "3")

    assert await cache.get("b") is None
    assert await cache.get("a") == "1"
    assert await cache.get("c") == "3"
    assert await cache.size() == 2


@pytest.mark.asyncio
async def test_in_memory_clear() -> None:
    cache = InMemoryCache()
    await cache.set("a", "1")
    await cache.clear()
    assert await cache.size() == 0


@pytest.mark.asyncio
async def test_redis_cache_prefixes_keys() -> None:
    client = AsyncMock()
    client.get.return_value = "Much wow"
    cache = RedisCache(client, prefix="test")

    await cache.set("caption:Doge:crypto", "Much wow")
    value = await cache.get("caption:Doge:crypto")

    assert value == "Much wow"
    client.set.assert_awaited_once_with("test:caption:Doge:crypto", "Much wow")
    client.get.assert_awaited_once_with("test:caption:Doge:crypto")


@pytest.mark.asyncio
async def test_redis_failure_is_a_miss() -> None:
    client = AsyncMock()
    client.get.side_effect = RedisConnectionError("down")
    client.set.side_effect = RedisConnectionError("down")
    cache = RedisCache(client)

    assert await cache.get("vibe:crypto") is None
    await cache.set("vibe:crypto", "Neon")


@pytest.mark.asyncio
async def test_redis_close() -> None:
    client = AsyncMock()
    await RedisCache(client).close()
    client.aclose.assert_awaited_once()


def test_build_cache_defaults_to_memory(settings) -> None:
    cache = build_cache(settings)
    assert isinstance(cache, InMemoryCache)
    assert cache.max_entries is None


def test_build_cache_bounded(settings) -> None:
    settings.generation_cache_max_entries = 5
    assert build_cache(settings).max_entries == 5


def test_build_cache_redis(settings) -> None:
    settings.redis_url = "redis://localhost:6379/0"
    assert isinstance(build_cache(settings), RedisCache)
