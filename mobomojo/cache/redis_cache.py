"""Redis caching layer for configuration summaries.

`summarize` is a pure function of the configuration and the catalog, so
its result can be cached under both. Falls back gracefully when Redis is
unavailable: the engine works without caching, just recomputes.

Cache key strategy:
  mobomojo:summary:{catalog fingerprint}:{sha256(sorted (category, id) pairs)}

The fingerprint changes with any price or spec edit, so summaries from an
older catalog are never served (they simply expire).
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from typing import Any, Awaitable, Callable, Iterable, Optional, Tuple

import redis.asyncio as aioredis

from mobomojo.models.build import Configuration

logger = logging.getLogger(__name__)

# ──────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────

CACHE_PREFIX = "mobomojo:summary:"
DEFAULT_TTL = int(os.getenv("MOBOMOJO_CACHE_TTL", "1800"))  # 30 minutes
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")


# ──────────────────────────────────────────────
# Cache Key Generation
# ──────────────────────────────────────────────


def build_cache_key(
    signature: Iterable[Tuple[str, str]], catalog_fingerprint: str = ""
) -> str:
    """Deterministic cache key from (category, component id) pairs.

    Pair order is irrelevant; the same slots over the same catalog always
    give the same key.
    """
    canonical = sorted([list(pair) for pair in signature])
    digest = hashlib.sha256(json.dumps(canonical).encode()).hexdigest()[:16]
    return f"{CACHE_PREFIX}{catalog_fingerprint}:{digest}"


def summary_cache_key(configuration: Configuration, catalog_fingerprint: str = "") -> str:
    """Cache key of a configuration's summary over one catalog version."""
    return build_cache_key(configuration.signature(), catalog_fingerprint)


# ──────────────────────────────────────────────
# Redis Cache Client
# ──────────────────────────────────────────────


class SummaryCache:
    """Redis-backed cache for serialized summaries.

    Every Redis error is logged and turned into a miss, so callers never
    see an exception from the cache.
    """

    def __init__(self, redis_url: str = REDIS_URL, ttl: int = DEFAULT_TTL) -> None:
        self.ttl = ttl
        self._redis_url = redis_url
        self._redis: Optional[aioredis.Redis] = None
        self._available = False

    @property
    def available(self) -> bool:
        """Whether Redis answered the last connect."""
        return self._available

    async def connect(self) -> bool:
        """Connect and ping. Returns True if Redis is usable."""
        try:
            self._redis = aioredis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
            )
        except ValueError as e:
            logger.warning("Invalid REDIS_URL %s: %s", self._redis_url, e)
            return False
        self._available = bool(await self._guard("ping", self._redis.ping))
        if self._available:
            logger.info("Redis cache connected: %s", self._redis_url)
        return self._available

    async def disconnect(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
        self._redis = None
        self._available = False

    async def _guard(
        self, operation: str, call: Callable[[], Awaitable[Any]], fallback: Any = None
    ) -> Any:
        try:
            return await call()
        except Exception as e:
            logger.warning("Redis %s failed: %s", operation, e)
            return fallback

    async def get(self, key: str) -> Optional[str]:
        """Cached summary JSON, or None on miss / error."""
        if not self._available:
            return None
        data = await self._guard("get", lambda: self._redis.get(key))
        logger.debug("Cache %s: %s", "HIT" if data else "MISS", key)
        return data

    async def set(self, key: str, value: str) -> bool:
        """Store summary JSON for `ttl` seconds. Returns True on success."""
        if not self._available:
            return False
        stored = await self._guard(
            "set", lambda: self._redis.set(key, value, ex=self.ttl), fallback=False
        )
        return bool(stored)

    async def stats(self) -> dict:
        """Availability and number of cached summaries (for /api/health)."""
        if not self._available:
            return {"available": False, "keys": 0}

        async def count() -> int:
            return len([k async for k in self._redis.scan_iter(f"{CACHE_PREFIX}*")])

        keys = await self._guard("scan", count)
        if keys is None:
            return {"available": False, "keys": 0}
        return {"available": True, "keys": keys, "ttl": self.ttl}


# ──────────────────────────────────────────────
# In-Memory Cache (tests / no Redis)
# ──────────────────────────────────────────────


class InMemoryCache(SummaryCache):
    """Dict-backed cache for tests and single-process deployments.

    No TTL enforcement: entries live as long as the process.
    """

    def __init__(self, ttl: int = DEFAULT_TTL) -> None:
        super().__init__(ttl=ttl)
        self._store: dict[str, str] = {}

    async def connect(self) -> bool:
        self._available = True
        return True

    async def disconnect(self) -> None:
        self._available = False

    async def get(self, key: str) -> Optional[str]:
        return self._store.get(key) if self._available else None

    async def set(self, key: str, value: str) -> bool:
        if not self._available:
            return False
        self._store[key] = value
        return True

    async def stats(self) -> dict:
        return {"available": self._available, "keys": len(self._store), "ttl": self.ttl}
