"""
pb_search: search across features, notes and products.

The API has no search endpoint, so each requested entity list is fetched and
matched on name/title and description/content. One failing entity type is
logged and left empty; the others are still reported.
"""
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import Field

from productboard_mcp.api.errors import ProductboardAPIError
from productboard_mcp.api.types import Page
from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.core.logging import logger
from productboard_mcp.utils.text import strip_html, truncate

from ..base import BaseTool, ToolParams, text_content

EntityType = Literal["feature", "note", "product"]

FETCH_LIMIT = 100


class GlobalSearchParams(ToolParams):
    query: str = Field(min_length=1, description="Search query")
    types: Optional[List[EntityType]] = Field(
        default=None, description="Entity types to search (defaults to all)"
    )
    limit: int = Field(default=10, ge=1, le=50, description="Maximum results per type")


def _matches(entity: Dict[str, Any], term: str, fields: tuple) -> bool:
    return any(term in str(entity.get(f) or "").lower() for f in fields)


def _feature_line(i: int, f: Dict[str, Any]) -> str:
    return (
        f"{i}. {f.get('name') or 'Untitled Feature'}\n"
        f"   Status: {(f.get('status') or {}).get('name') or 'Unknown'}\n"
        f"   Description: {truncate(strip_html(f.get('description'))) or 'No description'}"
    )


def _note_line(i: int, n: Dict[str, Any]) -> str:
    content = strip_html(n.get("content"))
    return (
        f"{i}. {n.get('title') or content[:50] or 'Untitled Note'}\n"
        f"   Customer: {(n.get('customer') or {}).get('email') or 'Unknown'}\n"
        f"   Content: {truncate(content)}"
    )


def _product_line(i: int, p: Dict[str, Any]) -> str:
    return (
        f"{i}. {p.get('name') or 'Untitled Product'}\n"
        f"   Description: {truncate(strip_html(p.get('description'))) or 'No description'}"
    )


# entity type -> (path, matched fields, section title, line formatter)
SEARCHABLE: Dict[str, tuple] = {
    "feature": ("/features", ("name", "description"), "FEATURES", _feature_line),
    "note": ("/notes", ("title", "content"), "NOTES", _note_line),
    "product": ("/products", ("name", "description"), "PRODUCTS", _product_line),
}


class GlobalSearchTool(BaseTool):
    name = "pb_search"
    description = "Search across all Productboard entities"
    params_model = GlobalSearchParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.SEARCH.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires search access",
    )

    async def _search(self, entity_type: str, term: str, limit: int) -> List[Dict[str, Any]]:
        path, fields, _, _ = SEARCHABLE[entity_type]
        try:
            response = await self.api_client.make_request("GET", path, params={"limit": FETCH_LIMIT})
        except ProductboardAPIError as e:
            logger.debug("Search of {} failed: {}", path, e)
            return []
        entities = [item for item in Page.from_response(response).items if isinstance(item, dict)]
        return [item for item in entities if _matches(item, term, fields)][:limit]

    async def execute_internal(self, params: GlobalSearchParams) -> Dict[str, Any]:
        logger.info("Global search for {!r}", params.query)
        term = params.query.lower()
        types = params.types or list(SEARCHABLE)

        sections = []
        for entity_type in SEARCHABLE:
            if entity_type not in types:
                continue
            found = await self._search(entity_type, term, params.limit)
            if not found:
                continue
            _, _, title, line = SEARCHABLE[entity_type]
            body = "\n\n".join(line(i, e) for i, e in enumerate(found, 1))
            sections.append(f"{title} ({len(found)}):\n{body}")

        if not sections:
            return text_content(f'No results found for "{params.query}"')
        return text_content(f'Search results for "{params.query}":\n\n' + "\n\n".join(sections))
