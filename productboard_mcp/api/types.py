"""Value types shared by the request-execution core."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Generic, List, Literal, Mapping, Optional, TypeVar

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

# Returned instead of a body for successful deletions
DELETE_SUCCESS: Dict[str, Any] = {"success": True}

T = TypeVar("T")


def encode_query_params(params: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Flatten query params to strings.

    None is dropped, list/tuple/set values are comma-joined, booleans are
    lowercased.
    """
    encoded: Dict[str, str] = {}
    if not params:
        return encoded
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[str(key)] = "true" if value else "false"
        elif isinstance(value, (list, tuple, set, frozenset)):
            encoded[str(key)] = ",".join(str(v) for v in value)
        else:
            encoded[str(key)] = str(value)
    return encoded


@dataclass(frozen=True)
class RequestDescriptor:
    """One outbound request. Built fresh per call and never mutated."""

    method: HttpMethod
    path: str
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Optional[Any] = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        method = str(self.method).upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method}")
        if not isinstance(self.path, str) or not self.path.strip():
            raise ValueError("RequestDescriptor.path must not be empty")

        object.__setattr__(self, "method", method)
        object.__setattr__(self, "params", MappingProxyType(dict(self.params or {})))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))

    @property
    def query(self) -> Dict[str, str]:
        return encode_query_params(self.params)


@dataclass
class Page(Generic[T]):
    items: List[T]
    cursor: Optional[str] = None
    has_more: bool = False
    offset: Optional[int] = None

    @classmethod
    def from_response(cls, response: Any) -> "Page[Any]":
        """Read a page from `{data, pagination}` or a bare array.

        A bare array is always the last page.
        """
        if isinstance(response, list):
            return cls(items=list(response))
        if not isinstance(response, Mapping):
            return cls(items=[])

        data = response.get("data")
        items = list(data) if isinstance(data, list) else []
        pagination = response.get("pagination")
        if not isinstance(pagination, Mapping):
            return cls(items=items)

        cursor = pagination.get("cursor")
        offset = pagination.get("offset")
        return cls(
            items=items,
            cursor=str(cursor) if cursor else None,
            has_more=bool(pagination.get("hasMore", False)),
            offset=offset if isinstance(offset, int) and not isinstance(offset, bool) else None,
        )


@dataclass(frozen=True)
class BatchOperation:
    method: HttpMethod
    path: str
    body: Optional[Any] = None
    params: Optional[Mapping[str, Any]] = None


@dataclass
class BatchResult:
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}
