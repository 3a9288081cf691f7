"""Per-key mutual exclusion."""

from contextlib import contextmanager
from threading import Lock
from typing import Hashable, Iterator


class KeyedLock:
    """
    A family of locks addressed by key.

    Holders of different keys never block each other. Lock objects are
    reference counted and dropped once no caller holds or waits on them,
    so the map does not grow with every key ever seen.
    """

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[Hashable, Lock] = {}
        self._refcounts: dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
                self._refcounts[key] = 0
            self._refcounts[key] += 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._refcounts[key] -= 1
                if self._refcounts[key] == 0:
                    del self._refcounts[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
