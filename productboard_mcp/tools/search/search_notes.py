"""
pb_note_search: customer notes matching a query and filters.

The API has no note search endpoint. The date range goes to `/notes` as
query params; the text query and the remaining filters are matched here.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from productboard_mcp.api.types import Page
from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.core.logging import logger
from productboard_mcp.utils.text import strip_html

from ..base import BaseTool, ToolParams

MATCH_ALL = "*"


class NoteSearchFilters(ToolParams):
    customer_emails: Optional[List[str]] = Field(default=None, description="Filter by customer emails")
    company_names: Optional[List[str]] = Field(default=None, description="Filter by company names")
    tags: Optional[List[str]] = Field(default=None, description="Filter by tags")
    source: Optional[List[str]] = Field(default=None, description="Filter by source origin")
    created_after: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    created_before: Optional[str] = Field(default=None, description="YYYY-MM-DD")
    feature_ids: Optional[List[str]] = Field(default=None, description="Filter by attached feature IDs")


class SearchNotesParams(ToolParams):
    query: str = Field(min_length=1, description='Search query text ("*" matches every note)')
    filters: Optional[NoteSearchFilters] = None
    sort: Literal["relevance", "created_at", "sentiment"] = Field(default="relevance", description="Sort results by")
    order: Literal["asc", "desc"] = Field(default="desc", description="Sort order")
    limit: int = Field(default=20, ge=1, le=100, description="Maximum number of results")
    offset: int = Field(default=0, ge=0, description="Number of results to skip")


def _lowered(values: Optional[List[str]]) -> set:
    return {v.lower() for v in values or []}


def _tag_names(note: Dict[str, Any]) -> set:
    return {
        str(t.get("name", "") if isinstance(t, dict) else t).lower()
        for t in note.get("tags") or []
    }


def _source_origin(note: Dict[str, Any]) -> str:
    source = note.get("source")
    if isinstance(source, dict):
        source = source.get("origin")
    return str(source or "").lower()


def _feature_ids(note: Dict[str, Any]) -> set:
    return {str(f.get("id")) for f in note.get("features") or [] if isinstance(f, dict)}


def matches_query(note: Dict[str, Any], query: str) -> bool:
    if query == MATCH_ALL:
        return True
    term = query.lower()
    return term in str(note.get("title") or "").lower() or term in strip_html(note.get("content")).lower()


def apply_filters(notes: List[Dict[str, Any]], filters: Optional[NoteSearchFilters]) -> List[Dict[str, Any]]:
    if filters is None:
        return notes

    emails = _lowered(filters.customer_emails)
    if emails:
        notes = [n for n in notes if str((n.get("customer") or {}).get("email") or "").lower() in emails]

    companies = _lowered(filters.company_names)
    if companies:
        notes = [n for n in notes if str((n.get("company") or {}).get("name") or "").lower() in companies]

    tags = _lowered(filters.tags)
    if tags:
        notes = [n for n in notes if _tag_names(n) & tags]

    sources = _lowered(filters.source)
    if sources:
        notes = [n for n in notes if _source_origin(n) in sources]

    if filters.feature_ids:
        wanted = set(filters.feature_ids)
        notes = [n for n in notes if _feature_ids(n) & wanted]

    return notes


class SearchNotesTool(BaseTool):
    name = "pb_note_search"
    description = "Advanced search for customer notes"
    params_model = SearchNotesParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.SEARCH.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires search access",
    )

    async def execute_internal(self, params: SearchNotesParams) -> Dict[str, Any]:
        logger.info("Searching notes for {!r}", params.query)

        query: Dict[str, Any] = {}
        if params.filters is not None:
            query["createdFrom"] = params.filters.created_after
            query["createdTo"] = params.filters.created_before

        response = await self.api_client.make_request("GET", "/notes", params=query)
        notes = [n for n in Page.from_response(response).items if isinstance(n, dict)]

        matched = [n for n in notes if matches_query(n, params.query)]
        matched = apply_filters(matched, params.filters)
        # relevance and sentiment keep the service order
        if params.sort == "created_at":
            matched = sorted(matched, key=lambda n: n.get("createdAt") or "", reverse=(params.order == "desc"))

        return {
            "success": True,
            "data": {
                "data": matched[params.offset:params.offset + params.limit],
                "total": len(matched),
                "offset": params.offset,
                "limit": params.limit,
            },
        }
