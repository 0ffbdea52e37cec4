"""Map raw transport / HTTP failures onto the `ErrorKind` taxonomy.

Both functions here are pure: the same inputs always produce the same error.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .errors import (
    DEFAULT_RETRY_AFTER_SECONDS,
    APIAuthenticationError,
    APIAuthorizationError,
    APINetworkError,
    APINotFoundError,
    APIRateLimitError,
    APIServerError,
    APIValidationError,
    ErrorKind,
    ProductboardAPIError,
)


class ErrorBodyShape(str, Enum):
    HAS_MESSAGE = "has_message"
    HAS_ERROR = "has_error"
    HAS_ERRORS = "has_errors"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorBody:
    shape: ErrorBodyShape
    message: Optional[str] = None


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def inspect_error_body(body: Any) -> ErrorBody:
    """Work out which of the service's error body shapes `body` is.

    Precedence: `message`, then `error`, then `errors`. Empty values are
    skipped so an empty `message` does not hide a populated `errors` list.
    """
    if not isinstance(body, Mapping):
        return ErrorBody(ErrorBodyShape.UNKNOWN)

    if body.get("message"):
        return ErrorBody(ErrorBodyShape.HAS_MESSAGE, str(body["message"]))
    if body.get("error"):
        return ErrorBody(ErrorBodyShape.HAS_ERROR, _stringify(body["error"]))
    if body.get("errors"):
        return ErrorBody(ErrorBodyShape.HAS_ERRORS, _stringify(body["errors"]))
    return ErrorBody(ErrorBodyShape.UNKNOWN)


def parse_retry_after(value: Optional[str]) -> int:
    """Seconds from a Retry-After header; 60 when absent or unparsable."""
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = int(str(value).strip())
    except ValueError:
        try:
            seconds = int(float(str(value).strip()))
        except (ValueError, OverflowError):
            return DEFAULT_RETRY_AFTER_SECONDS
    if seconds < 0:
        return DEFAULT_RETRY_AFTER_SECONDS
    return seconds


def _header(headers: Optional[Mapping[str, str]], name: str) -> Optional[str]:
    if not headers:
        return None
    # httpx.Headers is case-insensitive already, plain dicts are not
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def classify_failure(
    *,
    status_code: Optional[int],
    body: Any = None,
    headers: Optional[Mapping[str, str]] = None,
    fallback_message: str = "Request failed",
) -> ProductboardAPIError:
    """Produce exactly one classified error for a failed request.

    Args:
        status_code: HTTP status, or None when no response was received.
        body: decoded JSON error body (or raw text) when available.
        headers: response headers, consulted for Retry-After.
        fallback_message: the raw failure's own message.
    """
    if status_code is None:
        return APINetworkError(fallback_message)

    message = inspect_error_body(body).message or fallback_message

    if status_code == 400:
        return APIValidationError(message, body=body)
    if status_code == 401:
        return APIAuthenticationError(message, body=body)
    if status_code == 403:
        return APIAuthorizationError(message, body=body)
    if status_code == 404:
        resource = body.get("resource") if isinstance(body, Mapping) else None
        return APINotFoundError(
            message,
            resource=str(resource) if resource is not None else None,
            body=body,
        )
    if status_code == 429:
        return APIRateLimitError(
            message,
            retry_after_seconds=parse_retry_after(_header(headers, "retry-after")),
            body=body,
        )
    if status_code >= 500:
        return APIServerError(message, status_code=status_code, body=body)
    return ProductboardAPIError(
        message=message,
        kind=ErrorKind.GENERIC,
        status_code=status_code,
        body=body,
    )
