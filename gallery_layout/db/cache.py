"""Ordering cache with in-memory and Redis storage."""

import json
import logging
import os
import threading
import time
from typing import Any, Callable, Hashable, Iterable

import redis

from gallery_layout.engine.data_models import OrderingVariant

logger = logging.getLogger(__name__)


class CacheConfig:
    """Cache configuration."""

    def __init__(
        self,
        backend: str = "memory",
        redis_url: str | None = None,
        default_ttl: int = 0,
        prefix: str = "gallery-layout:",
    ):
        self.backend = backend
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.default_ttl = default_ttl
        self.prefix = prefix


class InMemoryCache:
    """Process-local cache. A ttl of 0 or None means no expiry."""

    def __init__(self, config: CacheConfig):
        self.config = config
        self._cache: dict[str, tuple[Any, float | None]] = {}
        self._prefix = config.prefix

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Any | None:
        """Get value from cache."""
        full_key = self._full_key(key)
        entry = self._cache.get(full_key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at and time.time() > expires_at:
            self._cache.pop(full_key, None)
            return None

        return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Set value in cache."""
        full_key = self._full_key(key)
        ttl = ttl or self.config.default_ttl
        expires_at = time.time() + ttl if ttl else None
        self._cache[full_key] = (value, expires_at)
        return True

    def delete(self, key: str) -> bool:
        """Delete value from cache."""
        return self._cache.pop(self._full_key(key), None) is not None

    def clear(self) -> bool:
        """Clear all cache entries."""
        self._cache.clear()
        return True


class RedisCache:
    """Redis cache implementation. Values are stored as JSON."""

    def __init__(self, config: CacheConfig, client: redis.Redis | None = None):
        self.config = config
        self._client = client or redis.from_url(
            config.redis_url,
            decode_responses=True,
        )
        self._prefix = config.prefix

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def ping(self) -> bool:
        return bool(self._client.ping())

    def get(self, key: str) -> Any | None:
        """Get value from cache."""
        value = self._client.get(self._full_key(key))
        if value is None:
            return None

        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Set value in cache."""
        full_key = self._full_key(key)
        ttl = ttl or self.config.default_ttl
        payload = json.dumps(value)

        if ttl:
            return bool(self._client.setex(full_key, ttl, payload))
        return bool(self._client.set(full_key, payload))

    def delete(self, key: str) -> bool:
        """Delete value from cache."""
        return bool(self._client.delete(self._full_key(key)))

    def clear(self) -> bool:
        """Clear all cache entries with prefix."""
        keys = list(self._client.scan_iter(match=f"{self._prefix}*"))
        if keys:
            self._client.delete(*keys)
        return True


def get_cache(config: CacheConfig | None = None) -> InMemoryCache | RedisCache:
    """Get cache storage for the configured backend.

    Falls back to the in-memory cache when Redis is configured but unreachable.
    """
    config = config or CacheConfig()

    if config.backend == "redis":
        try:
            cache = RedisCache(config)
            cache.ping()
            return cache
        except redis.RedisError as e:
            logger.warning(f"Redis unavailable at {config.redis_url}, using in-memory cache: {e}")

    return InMemoryCache(config)


class OrderingCache:
    """Memoizes orderings by (item-set fingerprint, column variant).

    Compute runs at most once per key under concurrent first access: the
    first caller holds a per-key lock while computing, later callers wait on
    it and read the published value. Values are only published after
    compute returns, so an abandoned or failed computation leaves no entry.

    Each per-key lock is counted by the callers using it and dropped when
    the last one leaves, so every caller in flight shares the same lock.
    """

    def __init__(self, storage: InMemoryCache | RedisCache | None = None, ttl: int | None = None):
        self._storage = storage or InMemoryCache(CacheConfig())
        self.ttl = ttl
        # key -> [lock, callers holding or waiting on it]
        self._locks: dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @staticmethod
    def _key(fingerprint: str, variant: OrderingVariant | str) -> str:
        variant = OrderingVariant(variant)
        return f"ordering:{fingerprint}:{variant.value}"

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _release_lock(self, key: str, lock: threading.Lock) -> None:
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None or entry[0] is not lock:
                return
            entry[1] -= 1
            if entry[1] <= 0:
                del self._locks[key]

    def get_or_compute(
        self,
        fingerprint: str,
        variant: OrderingVariant | str,
        compute: Callable[[], Iterable[Hashable]],
        refresh: bool = False,
    ) -> list:
        """Cached ordering for the key, computing it on a miss."""
        value, _ = self.get_or_compute_entry(fingerprint, variant, compute, refresh=refresh)
        return value

    def get_or_compute_entry(
        self,
        fingerprint: str,
        variant: OrderingVariant | str,
        compute: Callable[[], Iterable[Hashable]],
        refresh: bool = False,
    ) -> tuple[list, bool]:
        """Like get_or_compute but also reports whether the value was cached."""
        key = self._key(fingerprint, variant)

        if not refresh:
            cached = self._storage.get(key)
            if cached is not None:
                return list(cached), True

        lock = self._lock_for(key)
        try:
            with lock:
                if refresh:
                    self._storage.delete(key)
                else:
                    cached = self._storage.get(key)
                    if cached is not None:
                        return list(cached), True

                value = list(compute())
                self._storage.set(key, value, ttl=self.ttl)
        finally:
            self._release_lock(key, lock)

        logger.debug(f"Computed ordering {key} ({len(value)} items)")
        return list(value), False

    def invalidate(self, fingerprint: str) -> None:
        """Drop both variants cached for fingerprint."""
        for variant in OrderingVariant:
            self._storage.delete(self._key(fingerprint, variant))

    def clear(self) -> None:
        self._storage.clear()
