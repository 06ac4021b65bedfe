"""Process-scoped monotonic id generator."""

from __future__ import annotations

import threading


class IdSequence:
    """Thread-safe counter handing out strictly increasing integer ids.

    Ids are never reused and the sequence never resets. A caller that
    draws an id and then fails leaves a gap, which is fine.
    """

    def __init__(self, start: int = 1) -> None:
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value

    def peek(self) -> int:
        """The id the next call to :meth:`next` would return."""
        with self._lock:
            return self._next
