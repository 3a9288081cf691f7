"""Core utilities and shared functionality."""

from chainxchange.core.timezone import (
    now_utc,
    to_utc,
    parse_datetime_utc,
    UTC,
)
from chainxchange.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    InsufficientFundsError,
    InsufficientHoldingsError,
    ConcurrentModificationError,
    UpstreamError,
    UpstreamTimeoutError,
    RateLimitExceededError,
)
from chainxchange.core.locks import KeyedLock

__all__ = [
    "now_utc",
    "to_utc",
    "parse_datetime_utc",
    "UTC",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "InsufficientFundsError",
    "InsufficientHoldingsError",
    "ConcurrentModificationError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "RateLimitExceededError",
    "KeyedLock",
]
