"""
pb_note_list: customer feedback notes.

Returns one page by default (`pageCursor` continues from a previous call);
`fetchAll` walks every page through the pagination aggregator.
"""
from typing import Any, Dict, List, Optional

from pydantic import Field

from productboard_mcp.api.types import Page
from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.utils.text import strip_html, truncate

from ..base import BaseTool, ToolParams, text_content

MAX_PAGE_LIMIT = 2000


class ListNotesParams(ToolParams):
    feature_id: Optional[str] = Field(default=None, alias="featureId", description="Notes linked to this feature")
    company_id: Optional[str] = Field(default=None, alias="companyId", description="Filter by company ID")
    owner_email: Optional[str] = Field(default=None, alias="ownerEmail", description="Filter by note owner email")
    any_tag: Optional[List[str]] = Field(default=None, alias="anyTag", description="Any of these tags (OR)")
    all_tags: Optional[List[str]] = Field(default=None, alias="allTags", description="All of these tags (AND)")
    term: Optional[str] = Field(default=None, description="Full-text search term")
    created_from: Optional[str] = Field(default=None, alias="createdFrom", description="YYYY-MM-DD")
    created_to: Optional[str] = Field(default=None, alias="createdTo", description="YYYY-MM-DD")
    updated_from: Optional[str] = Field(default=None, alias="updatedFrom", description="YYYY-MM-DD")
    updated_to: Optional[str] = Field(default=None, alias="updatedTo", description="YYYY-MM-DD")
    limit: int = Field(default=100, ge=1, le=MAX_PAGE_LIMIT, description="Maximum number of notes per page")
    page_cursor: Optional[str] = Field(default=None, alias="pageCursor", description="Cursor of the next page")
    fetch_all: bool = Field(default=False, alias="fetchAll", description="Follow pagination to the end")


def build_query(params: ListNotesParams) -> Dict[str, Any]:
    query: Dict[str, Any] = {
        "pageLimit": params.limit,
        "featureId": params.feature_id,
        "companyId": params.company_id,
        "ownerEmail": params.owner_email,
        "term": params.term,
        "anyTag": params.any_tag or None,
        "allTags": params.all_tags or None,
        "createdFrom": params.created_from,
        "createdTo": params.created_to,
        "updatedFrom": params.updated_from,
        "updatedTo": params.updated_to,
    }
    return {k: v for k, v in query.items() if v is not None}


def _tag_label(tag: Any) -> str:
    return str(tag.get("name", "")) if isinstance(tag, dict) else str(tag)


def format_notes(notes: List[Dict[str, Any]], next_cursor: Optional[str] = None) -> str:
    if not notes:
        return "No notes found."

    lines = [f"Found {len(notes)} notes:", ""]
    for i, note in enumerate(notes, 1):
        content = strip_html(note.get("content"))
        tags = [_tag_label(t) for t in note.get("tags") or []]
        lines.extend([
            f"{i}. {note.get('title') or content[:50] or 'Untitled Note'}",
            f"   Customer: {(note.get('customer') or {}).get('email') or 'Unknown'}",
            f"   Company: {(note.get('company') or {}).get('name') or 'Unknown'}",
            f"   Content: {truncate(content)}",
            f"   Tags: {', '.join(tags) if tags else 'None'}",
            "",
        ])
    if next_cursor:
        lines.append(f"More notes available. Next pageCursor: {next_cursor}")
    return "\n".join(lines).rstrip() + "\n"


class ListNotesTool(BaseTool):
    name = "pb_note_list"
    description = "List customer feedback notes"
    params_model = ListNotesParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.NOTES_READ.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires read access to notes",
    )

    async def execute_internal(self, params: ListNotesParams) -> Dict[str, Any]:
        query = build_query(params)

        if params.fetch_all:
            if params.page_cursor:
                query["cursor"] = params.page_cursor
            notes = await self.api_client.collect_all("/notes", query)
            return text_content(format_notes([n for n in notes if isinstance(n, dict)]))

        if params.page_cursor:
            query["pageCursor"] = params.page_cursor
        response = await self.api_client.make_request("GET", "/notes", params=query)
        page = Page.from_response(response)
        notes = [n for n in page.items if isinstance(n, dict)]
        return text_content(format_notes(notes, page.cursor if page.has_more else None))
