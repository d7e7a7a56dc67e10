"""Redis-backed response cache.

Optional; lets several service instances share cached responses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import redis


@dataclass
class RedisResponseCache:
    """Store serialized responses under `<prefix>:<key>` with an expiry."""

    redis_url: str
    key_prefix: str
    ttl_seconds: int = 1800

    def __post_init__(self) -> None:
        self._client = redis.Redis.from_url(self.redis_url, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    def get(self, key: str) -> dict[str, Any] | None:
        raw = self._client.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    def put(self, key: str, payload: dict[str, Any]) -> None:
        line = json.dumps(payload, ensure_ascii=False)
        self._client.setex(self._key(key), self.ttl_seconds, line)
