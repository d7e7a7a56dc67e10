"""Short-lived response caches."""

from __future__ import annotations

from rawsource.caching.memory_cache import MemoryResponseCache, ResponseCache, cache_key
from rawsource.caching.redis_cache import RedisResponseCache
from rawsource.config import Settings


def get_response_cache(settings: Settings) -> ResponseCache | None:
    """Factory to create the configured response cache, or None when disabled."""

    if settings.cache_backend == "memory":
        return MemoryResponseCache(ttl_seconds=settings.cache_ttl_s)
    if settings.cache_backend == "redis":
        return RedisResponseCache(
            redis_url=settings.redis_url,
            key_prefix=settings.redis_key_prefix,
            ttl_seconds=settings.cache_ttl_s,
        )
    return None


__all__ = [
    "MemoryResponseCache",
    "RedisResponseCache",
    "ResponseCache",
    "cache_key",
    "get_response_cache",
]
