"""Productboard API error taxonomy.

Every failed call to the external service is classified into exactly one
`ErrorKind` so the retry loop can decide whether to try again and callers can
tell a bad request from an outage.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    NETWORK_FAILURE = "network_failure"
    GENERIC = "generic"


RETRYABLE_KINDS = frozenset({
    ErrorKind.NETWORK_FAILURE,
    ErrorKind.SERVER_ERROR,
    ErrorKind.RATE_LIMITED,
})

DEFAULT_RETRY_AFTER_SECONDS = 60


@dataclass(eq=False)
class ProductboardAPIError(Exception):
    """Base class for classified service errors."""

    message: str
    kind: ErrorKind = ErrorKind.GENERIC
    status_code: Optional[int] = None
    body: Optional[Any] = None
    attempts: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS


class APIValidationError(ProductboardAPIError):
    def __init__(self, message: str, *, body: Optional[Any] = None):
        super().__init__(message=message, kind=ErrorKind.VALIDATION, status_code=400, body=body)


class APIAuthenticationError(ProductboardAPIError):
    def __init__(self, message: str, *, status_code: Optional[int] = 401, body: Optional[Any] = None):
        super().__init__(message=message, kind=ErrorKind.AUTHENTICATION, status_code=status_code, body=body)


class APIAuthorizationError(ProductboardAPIError):
    def __init__(self, message: str, *, body: Optional[Any] = None):
        super().__init__(message=message, kind=ErrorKind.AUTHORIZATION, status_code=403, body=body)


class APINotFoundError(ProductboardAPIError):
    def __init__(self, message: str, *, resource: Optional[str] = None, body: Optional[Any] = None):
        super().__init__(message=message, kind=ErrorKind.NOT_FOUND, status_code=404, body=body)
        self.resource = resource


class APIRateLimitError(ProductboardAPIError):
    def __init__(
        self,
        message: str,
        *,
        retry_after_seconds: int = DEFAULT_RETRY_AFTER_SECONDS,
        body: Optional[Any] = None,
    ):
        super().__init__(message=message, kind=ErrorKind.RATE_LIMITED, status_code=429, body=body)
        self.retry_after_seconds = retry_after_seconds


class APIServerError(ProductboardAPIError):
    def __init__(self, message: str, *, status_code: int, body: Optional[Any] = None):
        super().__init__(message=message, kind=ErrorKind.SERVER_ERROR, status_code=status_code, body=body)


class APINetworkError(ProductboardAPIError):
    def __init__(self, message: str):
        super().__init__(message=message, kind=ErrorKind.NETWORK_FAILURE)


def is_retryable_kind(kind: ErrorKind) -> bool:
    """Default retry predicate: transient failures only."""
    return kind in RETRYABLE_KINDS


def is_retryable_error(error: BaseException) -> bool:
    return isinstance(error, ProductboardAPIError) and error.retryable
