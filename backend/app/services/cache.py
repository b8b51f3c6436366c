"""Key/value cache used for short-lived authentication secrets."""

from __future__ import annotations

import logging
import threading
import time
from functools import lru_cache
from typing import Protocol

from redis import Redis
from redis.exceptions import RedisError

from app.config import get_settings

logger = logging.getLogger(__name__)


class CacheBackend(Protocol):
    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds`` (never when zero)."""

    def get(self, key: str) -> str | None:
        """Return the live value for ``key`` or ``None``."""

    def delete(self, key: str) -> None:
        """Drop ``key`` if present."""


class InMemoryCache:
    """Process-local cache for single-node deployments and tests."""

    def __init__(self) -> None:
        self._store: dict[str, tuple[str, float | None]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds > 0 else None
        with self._lock:
            self._store[key] = (value, expires_at)

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and expires_at <= time.monotonic():
                del self._store[key]
                return None
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


class RedisCache:
    def __init__(self, url: str) -> None:
        self._client = Redis.from_url(url, decode_responses=True)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if ttl_seconds > 0:
            self._client.setex(key, ttl_seconds, value)
        else:
            self._client.set(key, value)

    def get(self, key: str) -> str | None:
        return self._client.get(key)

    def delete(self, key: str) -> None:
        self._client.delete(key)


@lru_cache(maxsize=1)
def get_cache() -> CacheBackend:
    """Return Redis when ``AUTH_CACHE_URL`` is configured, else an in-process cache."""

    url = get_settings().auth_cache_url
    if not url:
        return InMemoryCache()
    try:
        cache = RedisCache(url)
        cache._client.ping()
    except RedisError:
        logger.warning(
            "Auth cache at %s is unreachable; using in-process cache",
            url,
            exc_info=logger.isEnabledFor(logging.DEBUG),
        )
        return InMemoryCache()
    return cache
