from __future__ import annotations

import time
from typing import Iterable

from .model import Identity

__all__ = ["IdAllocator"]

class IdAllocator:
    """
    Time-ordered ids for notes and folders (one shared id space).

    Ids are wall-clock milliseconds. Two calls inside the same millisecond
    would collide, so the allocator never hands out an id at or below the
    last one it issued or observed.
    """

    def __init__(self, clock=time.time_ns):
        self._clock = clock
        self._last = 0

    def next(self) -> Identity:
        candidate = self._clock() // 1_000_000
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate

    def observe(self, ids: Iterable[Identity]) -> None:
        """Raise the floor above ids already present (e.g. loaded from disk)."""
        for i in ids:
            if isinstance(i, int) and i > self._last:
                self._last = i
