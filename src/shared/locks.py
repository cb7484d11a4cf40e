"""Keyed lock arena.

Hands out one lock per key (buyer id, order id), created on first use and
dropped once nobody holds or waits on it. Work on different keys never
contends; work on the same key is serialized in arrival order of the
underlying ``threading.Lock``.
"""

import threading
from contextlib import contextmanager

import structlog

from shared.deadline import Deadline
from shared.errors import Timeout

logger = structlog.get_logger(__name__)


class _Slot:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    def __init__(self, name: str):
        self.name = name
        self._guard = threading.Lock()
        self._slots: dict[str, _Slot] = {}

    def _checkout(self, key: str) -> _Slot:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.users += 1
            return slot

    def _release(self, key: str, slot: _Slot) -> None:
        with self._guard:
            slot.users -= 1
            if slot.users == 0 and self._slots.get(key) is slot:
                del self._slots[key]

    @contextmanager
    def hold(self, key: str, deadline: Deadline | float | None = None):
        """Hold the lock for ``key`` for the duration of the block.

        Raises ``Timeout`` when the lock cannot be acquired before the
        deadline runs out.
        """
        deadline = Deadline.of(deadline)
        slot = self._checkout(key)
        try:
            remaining = deadline.remaining()
            acquired = slot.lock.acquire() if remaining is None else slot.lock.acquire(timeout=remaining)
            if not acquired:
                logger.warning("Lock wait timed out", arena=self.name, key=key, timeout=deadline.timeout)
                raise Timeout(f"Timed out waiting for {self.name} lock on {key}")
            try:
                yield
            finally:
                slot.lock.release()
        finally:
            self._release(key, slot)

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    def __contains__(self, key: str) -> bool:
        with self._guard:
            return key in self._slots
