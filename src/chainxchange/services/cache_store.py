"""Keyed time-to-live cache with read-through fetching."""

import logging
from datetime import datetime, timedelta
from threading import Lock
from typing import Any, Callable, Optional, TypeVar, Union

from chainxchange.core.locks import KeyedLock
from chainxchange.core.timezone import now_utc
from chainxchange.domain.models import CacheEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

TtlLike = Union[int, float, timedelta]


def _as_timedelta(ttl: TtlLike) -> timedelta:
    if isinstance(ttl, timedelta):
        return ttl
    return timedelta(seconds=ttl)


class CacheStore:
    """
    In-memory map of cache key -> CacheEntry.

    Staleness is evaluated only at read time; stale entries stay in the map
    until a successful fetch supersedes them. A failed fetch leaves the
    previous entry untouched.

    By default two callers that miss on the same key both run their producer
    (the last write wins). With ``coalesce=True`` the check, fetch and write
    for a key run under that key's lock, so concurrent misses share one fetch.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = now_utc,
        coalesce: bool = False,
    ):
        self._clock = clock
        self._coalesce = coalesce
        self._entries: dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._key_locks = KeyedLock()

    def get_or_fetch(self, key: str, ttl: TtlLike, producer: Callable[[], T]) -> T:
        """Return the fresh cached value for key, or run producer and store its result."""
        if self._coalesce:
            with self._key_locks.hold(key):
                return self._get_or_fetch(key, ttl, producer)
        return self._get_or_fetch(key, ttl, producer)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value if present and fresh, else None."""
        entry = self._fresh_entry(key)
        return entry.value if entry is not None else None

    def peek(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key regardless of staleness."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: Any, ttl: TtlLike) -> CacheEntry:
        """Store value under key, stamped with the current time."""
        entry = CacheEntry(
            key=key,
            value=value,
            fetched_at=self._clock(),
            ttl=_as_timedelta(ttl),
        )
        with self._lock:
            self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        """Drop the entry for key, if any."""
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    # --- Internal ---

    def _get_or_fetch(self, key: str, ttl: TtlLike, producer: Callable[[], T]) -> T:
        entry = self._fresh_entry(key)
        if entry is not None:
            logger.debug("Cache hit: %s", key)
            return entry.value

        logger.debug("Cache miss: %s", key)
        value = producer()
        self.put(key, value, ttl)
        return value

    def _fresh_entry(self, key: str) -> Optional[CacheEntry]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or entry.is_stale(now):
            return None
        return entry
