from __future__ import annotations

import itertools

import pytest

from memopad.core.ids import IdAllocator
from memopad.core.log import Log
from memopad.core.storage import MemoryBackend
from memopad.core.store import MemoStore


class StepClock:
    """Deterministic nanosecond clock advancing 1 ms per call."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self._ticks = itertools.count(start_ms)

    def __call__(self) -> int:
        return next(self._ticks) * 1_000_000


@pytest.fixture(autouse=True)
def quiet_log():
    Log.set_verbosity(0)
    Log.clear()
    yield
    Log.set_verbosity(0)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> MemoStore:
    return MemoStore(backend, allocator=IdAllocator(clock=StepClock()))
