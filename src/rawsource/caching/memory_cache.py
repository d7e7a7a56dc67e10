"""In-process TTL cache for pipeline responses."""

from __future__ import annotations

import hashlib
import time
from typing import Any, Protocol

from rawsource.utils.text import collapse_whitespace


class ResponseCache(Protocol):
    """Cache interface for serialized pipeline responses."""

    def get(self, key: str) -> dict[str, Any] | None:
        """Return a cached payload, or None."""

    def put(self, key: str, payload: dict[str, Any]) -> None:
        """Store a payload."""


def cache_key(query: str, *, debug: bool = False) -> str:
    """Key a request by its normalized query and debug flag."""

    normalized = collapse_whitespace(query)
    digest = hashlib.sha256(f"{normalized}\x00{int(debug)}".encode("utf-8")).hexdigest()
    return f"search:{digest}"


class MemoryResponseCache:
    """TTL (Time To Live) cache implementation."""

    def __init__(self, ttl_seconds: int = 1800, max_size: int = 1000):
        """Initialize TTL cache.

        Args:
            ttl_seconds: Time to live in seconds.
            max_size: Entries kept before the oldest are evicted.
        """
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self.cache: dict[str, tuple[dict[str, Any], float]] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        """Get item from cache if not expired."""
        if key not in self.cache:
            return None
        value, expire_time = self.cache[key]
        if time.time() > expire_time:
            del self.cache[key]
            return None
        return value

    def put(self, key: str, payload: dict[str, Any]) -> None:
        """Put item in cache with TTL."""
        if key not in self.cache and len(self.cache) >= self.max_size:
            self.cleanup_expired()
            if len(self.cache) >= self.max_size:
                self.cache.pop(next(iter(self.cache)))
        self.cache[key] = (payload, time.time() + self.ttl_seconds)

    def cleanup_expired(self) -> int:
        """Remove expired items and return count of removed items."""
        now = time.time()
        expired_keys = [k for k, (_, expire_time) in self.cache.items() if now > expire_time]
        for key in expired_keys:
            del self.cache[key]
        return len(expired_keys)
