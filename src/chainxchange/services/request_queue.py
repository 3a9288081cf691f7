"""Single-flight queue in front of the rate-limited upstream price provider."""

import logging
import queue
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Optional

import requests

from chainxchange.core.exceptions import (
    RateLimitExceededError,
    UpstreamError,
    UpstreamTimeoutError,
)
from chainxchange.core.timezone import now_utc, parse_datetime_utc
from chainxchange.domain.models import FetchTask

logger = logging.getLogger(__name__)

_STOP = object()


class RequestQueue:
    """
    Processes upstream GET requests one at a time, in submission order.

    A single worker thread drains a FIFO queue, so no matter how many
    callers submit concurrently at most one request is in flight. Each
    task is attempted with its own timeout; 429 responses are retried
    after the provider's Retry-After hint, up to ``max_attempts`` in
    total. Any other failure (timeout, network error, non-2xx status,
    malformed or empty payload) fails the task immediately.

    Callers block in ``enqueue`` (or hold an unresolved Future from
    ``submit``) until their task reaches the head of the queue and
    completes.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
        max_attempts: int = 3,
        default_retry_after: float = 10.0,
        user_agent: str = "ChainXchange/1.0",
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._session = session or requests.Session()
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._default_retry_after = default_retry_after
        self._headers = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }
        self._sleep = sleep

        self._queue: "queue.Queue[Any]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()
        self._closed = False

    def submit(self, task: FetchTask) -> "Future[Any]":
        """Queue a task and return a Future resolved with its payload or error."""
        future: "Future[Any]" = Future()
        with self._state_lock:
            if self._closed:
                raise RuntimeError("RequestQueue is closed")
            self._ensure_worker()
            self._queue.put((task, future))
        logger.debug("Queued %s (%d pending)", task.describe(), self._queue.qsize())
        return future

    def enqueue(self, task: FetchTask) -> Any:
        """Queue a task and block until it completes. Raises the task's error."""
        return self.submit(task).result()

    @property
    def pending(self) -> int:
        """Number of tasks waiting behind the one in flight."""
        return self._queue.qsize()

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop accepting work, let queued tasks finish, and stop the worker."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            worker = self._worker
            if worker is not None:
                self._queue.put(_STOP)
        if worker is not None:
            worker.join(timeout)

    # --- Internal ---

    def _ensure_worker(self) -> None:
        if self._worker is None:
            self._worker = threading.Thread(
                target=self._run,
                name="upstream-request-queue",
                daemon=True,
            )
            self._worker.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                task, future = item
                if not future.set_running_or_notify_cancel():
                    continue
                try:
                    result = self._process(task)
                except Exception as exc:  # handed to the waiting caller
                    future.set_exception(exc)
                else:
                    future.set_result(result)
            finally:
                self._queue.task_done()

    def _process(self, task: FetchTask) -> Any:
        """Run the bounded retry loop for one task."""
        last_error: Optional[RateLimitExceededError] = None

        while task.attempt < self._max_attempts:
            logger.debug(
                "Fetching %s (attempt %d/%d)",
                task.describe(),
                task.attempt + 1,
                self._max_attempts,
            )
            try:
                return self._attempt(task)
            except RateLimitExceededError as exc:
                last_error = exc
                task.attempt += 1
                if task.attempt >= self._max_attempts:
                    break
                wait = exc.retry_after if exc.retry_after is not None else self._default_retry_after
                logger.warning(
                    "Rate limited (429) on %s. Waiting %.1fs before retry. Attempt %d/%d",
                    task.describe(),
                    wait,
                    task.attempt,
                    self._max_attempts,
                )
                self._sleep(wait)
            except UpstreamError as exc:
                logger.warning("Upstream request for %s failed: %s", task.describe(), exc.message)
                raise

        logger.warning(
            "Giving up on %s after %d rate-limited attempts",
            task.describe(),
            self._max_attempts,
        )
        raise last_error

    def _attempt(self, task: FetchTask) -> Any:
        """One upstream call. Translates transport outcomes into upstream errors."""
        try:
            response = self._session.get(
                task.url,
                params=task.params or None,
                headers=self._headers,
                timeout=self._timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise UpstreamTimeoutError(
                f"Timed out after {self._timeout:g}s fetching {task.describe()}"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise UpstreamError(f"Request to {task.describe()} failed: {exc}") from exc

        status = response.status_code
        if status == 429:
            raise RateLimitExceededError(
                f"Rate limit exceeded fetching {task.describe()}",
                retry_after=self._parse_retry_after(response.headers.get("Retry-After")),
            )
        if not 200 <= status < 300:
            raise UpstreamError(
                f"Upstream returned HTTP {status} for {task.describe()}",
                status_code=status,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Malformed JSON from upstream for {task.describe()}",
                status_code=status,
            ) from exc

        if payload is None or (isinstance(payload, list) and not payload):
            raise UpstreamError(
                f"Empty response from upstream for {task.describe()}",
                status_code=status,
            )
        return payload

    def _parse_retry_after(self, value: Optional[str]) -> Optional[float]:
        """Retry-After is either delta-seconds or an HTTP date. None if absent or unreadable."""
        if value is None or not str(value).strip():
            return None
        try:
            return max(0.0, float(value))
        except (TypeError, ValueError):
            pass
        try:
            retry_at = parse_datetime_utc(str(value))
        except (ValueError, OverflowError):
            logger.debug("Ignoring unreadable Retry-After header: %r", value)
            return None
        return max(0.0, (retry_at - now_utc()).total_seconds())
