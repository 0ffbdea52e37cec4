"""
Productboard API request-execution core.

The client itself lives in `productboard_mcp.api.client`; this package root
only re-exports the leaf types so auth and retry code can import them without
pulling in the client.
"""
from .errors import (
    APIAuthenticationError,
    APIAuthorizationError,
    APINetworkError,
    APINotFoundError,
    APIRateLimitError,
    APIServerError,
    APIValidationError,
    ErrorKind,
    ProductboardAPIError,
    is_retryable_error,
)
from .types import BatchOperation, BatchResult, Page, RequestDescriptor

__all__ = [
    "APIAuthenticationError",
    "APIAuthorizationError",
    "APINetworkError",
    "APINotFoundError",
    "APIRateLimitError",
    "APIServerError",
    "APIValidationError",
    "ErrorKind",
    "ProductboardAPIError",
    "is_retryable_error",
    "BatchOperation",
    "BatchResult",
    "Page",
    "RequestDescriptor",
]
