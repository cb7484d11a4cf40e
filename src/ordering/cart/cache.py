"""Cart cache port and the in-process implementation.

A cache stores one JSON document per key with a time-to-live and provides a
per-key lock so that read-modify-write cycles on one buyer's cart never
interleave.
"""

import json
import os
import threading
import time
from abc import ABC, abstractmethod

from shared.locks import KeyedLocks

from ordering import settings


class CartCache(ABC):
    """Abstract key-value store for cart documents."""

    @abstractmethod
    def get(self, key: str) -> dict | None:
        """Return the stored document, or None when absent or expired."""
        ...

    @abstractmethod
    def set(self, key: str, value: dict, ttl: int | None = None) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Deleting an absent key is not an error."""
        ...

    @abstractmethod
    def lock(self, key: str, deadline):
        """Context manager holding the lock for ``key`` until the block exits.

        Raises ``Timeout`` when the lock is not acquired before ``deadline``.
        """
        ...


class MemoryCartCache(CartCache):
    """Dictionary-backed cache with lazy TTL expiry, for one process."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}
        self._guard = threading.Lock()
        self._locks = KeyedLocks("cart")

    def get(self, key: str) -> dict | None:
        with self._guard:
            entry = self._data.get(key)
            if entry is None:
                return None
            raw, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._data[key]
                return None
        return json.loads(raw)

    def set(self, key: str, value: dict, ttl: int | None = None) -> None:
        raw = json.dumps(value)
        expires_at = None if ttl is None else self._clock() + ttl
        with self._guard:
            self._data[key] = (raw, expires_at)

    def delete(self, key: str) -> None:
        with self._guard:
            self._data.pop(key, None)

    def lock(self, key: str, deadline):
        return self._locks.hold(key, deadline)

    def keys(self) -> list[str]:
        with self._guard:
            return list(self._data)

    def flush(self) -> None:
        with self._guard:
            self._data.clear()


_cache_instance = None


def get_cart_cache() -> CartCache:
    """Return the configured cart cache (singleton).

    ``CART_CACHE=memory`` (default) keeps carts in process; ``CART_CACHE=redis``
    shares them, and their locks, through the Redis server at ``REDIS_URL``.
    """
    global _cache_instance
    if _cache_instance is None:
        backend = os.environ.get("CART_CACHE", "memory")
        if backend == "memory":
            _cache_instance = MemoryCartCache()
        elif backend == "redis":
            from ordering.cart.redis_cache import RedisCartCache

            _cache_instance = RedisCartCache.from_url(settings.REDIS_URL)
        else:
            raise ValueError(f"Unknown cart cache backend: {backend}")
    return _cache_instance


def reset_cart_cache():
    """Reset the cache singleton (useful for testing)."""
    global _cache_instance
    _cache_instance = None
