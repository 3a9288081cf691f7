"""Application-level exceptions."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class InsufficientFundsError(AppError):
    """Raised when a buy costs more than the available cash balance."""

    def __init__(self, requested: str, available: str):
        super().__init__(
            f"Insufficient funds: requested {requested}, available {available}",
            code="INSUFFICIENT_FUNDS",
        )


class InsufficientHoldingsError(AppError):
    """Raised when attempting to sell more units than held."""

    def __init__(self, asset_id: str, requested: str, available: str):
        super().__init__(
            f"Insufficient holdings of {asset_id}: requested {requested}, available {available}",
            code="INSUFFICIENT_HOLDINGS",
        )


class ConcurrentModificationError(AppError):
    """Raised when a row changed between read and conditional write."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} was modified concurrently: {identifier}",
            code="CONCURRENT_MODIFICATION",
        )


class UpstreamError(AppError):
    """Raised when the upstream price provider fails or returns bad data."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: str = "UPSTREAM_ERROR",
    ):
        self.status_code = status_code
        super().__init__(message, code=code)


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream call exceeds its timeout."""

    def __init__(self, message: str):
        super().__init__(message, code="UPSTREAM_TIMEOUT")


class RateLimitExceededError(UpstreamError):
    """Raised when the upstream provider keeps answering 429."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(message, status_code=429, code="RATE_LIMIT_EXCEEDED")
