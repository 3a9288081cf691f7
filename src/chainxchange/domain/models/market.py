"""Market data plumbing models: cached values and queued fetches."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional


@dataclass
class CacheEntry:
    """A cached upstream payload and the moment it was fetched."""

    key: str
    value: Any
    fetched_at: datetime
    ttl: timedelta

    def is_stale(self, now: datetime) -> bool:
        """Stale once the entry is at least ttl old."""
        return now - self.fetched_at >= self.ttl


@dataclass
class FetchTask:
    """
    One queued upstream GET request.

    attempt starts at 0 and is incremented by the queue on each retry.
    """

    url: str
    params: dict[str, Any] = field(default_factory=dict)
    attempt: int = 0
    label: Optional[str] = None

    def describe(self) -> str:
        """Short human-readable identifier for logs."""
        return self.label or self.url
