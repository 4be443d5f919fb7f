from __future__ import annotations

from threading import Lock


class MonotonicIdGenerator:
    """Thread-safe sequence of increasing integer ids, starting at ``start``."""

    def __init__(self, start: int = 1) -> None:
        self._next = start
        self._lock = Lock()

    def next_id(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def advance_past(self, value: int) -> None:
        """Ensure ids handed out from now on are greater than ``value``."""
        with self._lock:
            if value >= self._next:
                self._next = value + 1
