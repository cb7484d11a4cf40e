"""Operation deadlines.

Store and engine calls accept an optional timeout in seconds. A ``Deadline``
turns it into an absolute point on the monotonic clock so that every step of
a multi-step operation (lock wait, catalog lookups, persistence) draws from
the same budget.
"""

import time

from shared.errors import Timeout


class Deadline:
    def __init__(self, timeout: float | None = None, clock=time.monotonic):
        self._clock = clock
        self.timeout = timeout
        self._expires_at = None if timeout is None else clock() + max(timeout, 0.0)

    @classmethod
    def of(cls, value: "Deadline | float | None") -> "Deadline":
        """Accept either a ready-made deadline or a timeout in seconds."""
        if isinstance(value, Deadline):
            return value
        return cls(value)

    @property
    def unbounded(self) -> bool:
        return self._expires_at is None

    def remaining(self) -> float | None:
        """Seconds left, ``None`` when unbounded, never negative."""
        if self._expires_at is None:
            return None
        return max(self._expires_at - self._clock(), 0.0)

    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at

    def check(self, operation: str) -> None:
        if self.expired():
            raise Timeout(f"{operation} exceeded its deadline of {self.timeout}s")

    def __repr__(self) -> str:
        return f"Deadline(timeout={self.timeout!r}, remaining={self.remaining()!r})"
