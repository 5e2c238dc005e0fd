"""A single run-wide deadline shared by every cancellable operation."""

from __future__ import annotations

import threading
import time

from .errors import DeadlineExceeded


class Deadline:
    """Monotonic deadline that can also be fired early with :meth:`cancel`.

    Workers poll it cooperatively; nothing is interrupted preemptively.
    """

    def __init__(self, timeout_sec: float | None, *, clock=time.monotonic) -> None:
        self._clock = clock
        self._expires_at = None if timeout_sec is None else clock() + timeout_sec
        self._cancelled = threading.Event()

    def remaining(self) -> float | None:
        """Seconds left, ``0.0`` once fired, ``None`` for an unbounded deadline."""
        if self._cancelled.is_set():
            return 0.0
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() == 0.0

    def cancel(self) -> None:
        self._cancelled.set()

    def check(self, what: str = "operation") -> None:
        if self.expired():
            raise DeadlineExceeded(f"deadline exceeded before {what}")

    def clamp(self, timeout: float) -> float:
        """Shorten ``timeout`` so it never outlives the deadline."""
        left = self.remaining()
        return timeout if left is None else min(timeout, left)
