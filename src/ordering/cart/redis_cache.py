"""Redis-backed cart cache shared by every API worker.

Documents are stored as JSON strings with ``SET ... EX``. Per-key locking uses
redis-py's ``Lock`` so that two workers mutating one buyer's cart serialize on
the server rather than in process.
"""

import json
from contextlib import contextmanager

import redis
import structlog
from shared.deadline import Deadline
from shared.errors import Timeout, Unavailable

from ordering.cart.cache import CartCache

logger = structlog.get_logger(__name__)

# Upper bound on how long a crashed worker can keep a cart locked
LOCK_LEASE_SECONDS = 30


@contextmanager
def _translate_errors(operation: str, key: str):
    try:
        yield
    except redis.exceptions.TimeoutError as exc:
        logger.warning("Cart cache timed out", operation=operation, key=key)
        raise Timeout(f"Cart cache timed out during {operation}") from exc
    except redis.exceptions.ConnectionError as exc:
        logger.error("Cart cache unreachable", operation=operation, key=key, error=str(exc))
        raise Unavailable("Cart cache is unreachable") from exc


class RedisCartCache(CartCache):
    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCartCache":
        return cls(redis.Redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> dict | None:
        with _translate_errors("get", key):
            raw = self.client.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: dict, ttl: int | None = None) -> None:
        with _translate_errors("set", key):
            self.client.set(key, json.dumps(value), ex=ttl)

    def delete(self, key: str) -> None:
        with _translate_errors("delete", key):
            self.client.delete(key)

    @contextmanager
    def lock(self, key: str, deadline):
        deadline = Deadline.of(deadline)
        lock = self.client.lock(
            f"{key}:lock",
            timeout=LOCK_LEASE_SECONDS,
            blocking_timeout=deadline.remaining(),
        )
        with _translate_errors("lock", key):
            acquired = lock.acquire()
        if not acquired:
            raise Timeout(f"Timed out waiting for cart lock on {key}")
        try:
            yield
        finally:
            try:
                lock.release()
            except redis.exceptions.LockError:
                logger.warning("Cart lock lease expired before release", key=key)
