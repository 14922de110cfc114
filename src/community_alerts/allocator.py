"""Monotonic identifier allocation for new reports."""

from __future__ import annotations

import threading

DEFAULT_ID_BASE = 1000


class IdAllocator:
    """Hands out strictly increasing integer IDs starting at ``base``.

    Sequence counter protected by a lock, in the same way the audit
    writer protects its evidence sequence.
    """

    def __init__(self, base: int = DEFAULT_ID_BASE) -> None:
        self.base = base
        self._next = base
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
        return value

    def peek(self) -> int:
        """Return the ID the next call to next() will issue."""
        with self._lock:
            return self._next

    def observe(self, used_id: int) -> None:
        """Advance past an ID issued in an earlier run (e.g. loaded from disk)."""
        with self._lock:
            if used_id >= self._next:
                self._next = used_id + 1

    def reset(self) -> None:
        """Reset the counter to base. For testing only."""
        with self._lock:
            self._next = self.base
