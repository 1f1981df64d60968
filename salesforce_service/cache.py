"""Pass-through key/value cache with per-entry TTL.

Cache failures never fail a request: reads degrade to a miss and writes are
dropped, both logged at WARNING. Only :meth:`CacheService.ping` raises, for the
health check.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import time
from abc import ABC, abstractmethod
from threading import Lock
from typing import Any

from redis import Redis
from redis.exceptions import RedisError

from .config import Settings

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


class CacheService(ABC):
    """JSON value cache keyed by string."""

    def __init__(self, default_ttl: int = DEFAULT_TTL_SECONDS) -> None:
        self._default_ttl = default_ttl

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value or ``None`` on miss."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Cache ``value`` for ``ttl`` seconds (default TTL when omitted)."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Evict a single key."""

    @abstractmethod
    def delete_pattern(self, pattern: str) -> None:
        """Evict every key matching a glob pattern."""

    @abstractmethod
    def ping(self) -> None:
        """Raise when the cache backend is unreachable."""

    def close(self) -> None:
        """Release backend resources."""


class RedisCache(CacheService):
    """Redis-backed cache; keys are namespaced by ``key_prefix``."""

    def __init__(
        self,
        client: Redis,
        *,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        key_prefix: str = "salesforce",
    ) -> None:
        super().__init__(default_ttl)
        self._client = client
        self._key_prefix = key_prefix

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}:{key}"

    def get(self, key: str) -> Any | None:
        try:
            raw = self._client.get(self._key(key))
        except RedisError as exc:
            logger.warning("cache get failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("cache entry %s is not valid JSON: %s", key, exc)
            return None

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        try:
            self._client.setex(self._key(key), ttl or self._default_ttl, json.dumps(value))
        except RedisError as exc:
            logger.warning("cache set failed for %s: %s", key, exc)

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except RedisError as exc:
            logger.warning("cache delete failed for %s: %s", key, exc)

    def delete_pattern(self, pattern: str) -> None:
        try:
            keys = list(self._client.scan_iter(match=self._key(pattern)))
            if keys:
                self._client.delete(*keys)
        except RedisError as exc:
            logger.warning("cache delete pattern failed for %s: %s", pattern, exc)

    def ping(self) -> None:
        self._client.ping()

    def close(self) -> None:
        self._client.close()


class MemoryCache(CacheService):
    """Thread-safe in-process cache used alongside the in-memory storage backend."""

    def __init__(self, default_ttl: int = DEFAULT_TTL_SECONDS) -> None:
        super().__init__(default_ttl)
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Any | None:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, raw = entry
            if expires_at <= now:
                del self._entries[key]
                return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = time.monotonic() + (ttl or self._default_ttl)
        raw = json.dumps(value)
        with self._lock:
            self._entries[key] = (expires_at, raw)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def delete_pattern(self, pattern: str) -> None:
        with self._lock:
            for key in [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]:
                del self._entries[key]

    def ping(self) -> None:
        return None


def build_cache(settings: Settings) -> CacheService:
    """Use Redis with the database backend and an in-process cache with memory storage."""
    if settings.uses_memory_storage:
        logger.info("cache using in-memory backend")
        return MemoryCache(default_ttl=settings.cache_ttl_seconds)

    client = Redis(host=settings.redis_host, port=settings.redis_port)
    logger.info("cache configured for redis backend at %s:%s", settings.redis_host, settings.redis_port)
    return RedisCache(client, default_ttl=settings.cache_ttl_seconds)
