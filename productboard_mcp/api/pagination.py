"""Cursor / offset pagination over the API client.

Two modes:

- cursor: the page handed back a cursor, which replaces the previous one in
  the next request.
- offset fallback: `hasMore` is true but no cursor came back, so the offset is
  advanced by the number of items received. This is a compatibility shim for
  endpoints that mix both styles; the service is not guaranteed to honour it.

A hard page ceiling and a repeated-cursor check keep a misbehaving upstream
from looping forever.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol

from productboard_mcp.core.logging import logger

from .types import Page


class PageFetcher(Protocol):
    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any: ...


class PaginationMode(str, Enum):
    CURSOR = "cursor"
    OFFSET_FALLBACK = "offset_fallback"


@dataclass
class PaginationState:
    params: Dict[str, Any]
    mode: PaginationMode = PaginationMode.CURSOR
    cursor: Optional[str] = None
    offset: int = 0
    pages: int = 0
    seen_cursors: set = field(default_factory=set)

    def request_params(self) -> Dict[str, Any]:
        params = dict(self.params)
        if self.mode is PaginationMode.CURSOR:
            params.pop("offset", None)
            if self.cursor:
                params["cursor"] = self.cursor
        else:
            params.pop("cursor", None)
            params["offset"] = self.offset
        return params

    def advance(self, page: Page[Any]) -> bool:
        """Move to the next page. Returns False when iteration should stop."""
        if not page.has_more:
            return False

        if page.cursor:
            if page.cursor in self.seen_cursors:
                logger.warning("Pagination cursor repeated ({}), stopping", page.cursor)
                return False
            self.seen_cursors.add(page.cursor)
            self.mode = PaginationMode.CURSOR
            self.cursor = page.cursor
            return True

        if not page.items:
            logger.warning("Page reported hasMore without items or cursor, stopping")
            return False

        base = page.offset if page.offset is not None else self.offset
        self.mode = PaginationMode.OFFSET_FALLBACK
        self.cursor = None
        self.offset = base + len(page.items)
        return True


class PaginationAggregator:
    """Collects every page of a list endpoint into one ordered list."""

    def __init__(self, client: PageFetcher, *, page_limit: int = 100, max_pages: int = 100):
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self.client = client
        self.page_limit = page_limit
        self.max_pages = max_pages

    async def collect_all(self, path: str, params: Optional[Mapping[str, Any]] = None) -> List[Any]:
        base_params: Dict[str, Any] = dict(params or {})
        base_params.setdefault("limit", self.page_limit)

        state = PaginationState(params=base_params)
        if base_params.get("cursor"):
            state.cursor = str(base_params["cursor"])
            state.seen_cursors.add(state.cursor)
        if isinstance(base_params.get("offset"), int) and not base_params.get("cursor"):
            state.offset = base_params["offset"]
            if state.offset:
                state.mode = PaginationMode.OFFSET_FALLBACK

        items: List[Any] = []
        while True:
            response = await self.client.get(path, state.request_params())
            page = Page.from_response(response)
            state.pages += 1
            items.extend(page.items)

            if not state.advance(page):
                break

            if state.pages >= self.max_pages:
                logger.warning(
                    "Pagination of {} stopped at the {} page ceiling with {} items collected",
                    path,
                    self.max_pages,
                    len(items),
                )
                break

        logger.debug("Collected {} items from {} in {} page(s)", len(items), path, state.pages)
        return items
