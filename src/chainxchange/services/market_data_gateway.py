"""Market data gateway: the only path from the application to the upstream provider."""

import logging
from typing import Any, Optional

from chainxchange.core.exceptions import UpstreamError, ValidationError
from chainxchange.domain.models import FetchTask
from chainxchange.services.cache_store import CacheStore
from chainxchange.services.request_queue import RequestQueue

logger = logging.getLogger(__name__)


class MarketDataGateway:
    """
    Composes the request queue and the TTL cache.

    On a cache miss the request is queued behind any other upstream work;
    errors propagate unchanged to the caller. The cache has no query-aware
    invalidation, so callers must pick a distinct cache key for each
    logically distinct query (asset IDs, page numbers, ranges...).
    """

    def __init__(self, request_queue: RequestQueue, cache: CacheStore):
        self._queue = request_queue
        self._cache = cache

    def fetch_with_cache(
        self,
        endpoint: str,
        params: Optional[dict[str, Any]],
        cache_key: str,
        ttl_seconds: float,
    ) -> Any:
        """Return the JSON payload for endpoint+params, served from cache when fresh."""
        if not endpoint:
            raise ValidationError("endpoint is required")
        if not cache_key:
            raise ValidationError("cache_key is required")
        if ttl_seconds < 0:
            raise ValidationError("ttl_seconds cannot be negative")

        def _produce() -> Any:
            task = FetchTask(url=endpoint, params=dict(params or {}), label=cache_key)
            try:
                return self._queue.enqueue(task)
            except UpstreamError as exc:
                # Only server-side failures are worth an error log
                if exc.status_code is not None and exc.status_code >= 500:
                    logger.error("Upstream API error for %s: %s", cache_key, exc.message)
                raise

        return self._cache.get_or_fetch(cache_key, ttl_seconds, _produce)

    def close(self) -> None:
        """Shut down the underlying request queue."""
        self._queue.close()
