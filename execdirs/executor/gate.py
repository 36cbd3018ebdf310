from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class ConcurrencyGate:
    """Counting permit pool bounding how many jobs run at once."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._permits = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._active = 0
        self._peak = 0

    @property
    def active(self) -> int:
        with self._lock:
            return self._active

    @property
    def peak(self) -> int:
        with self._lock:
            return self._peak

    def acquire(self) -> None:
        if not self._permits.acquire(blocking=False):
            logger.debug("all %d permits in use, waiting", self.capacity)
            self._permits.acquire()
        with self._lock:
            self._active += 1
            self._peak = max(self._peak, self._active)

    def release(self) -> None:
        with self._lock:
            self._active -= 1
        self._permits.release()

    def __enter__(self) -> ConcurrencyGate:
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
