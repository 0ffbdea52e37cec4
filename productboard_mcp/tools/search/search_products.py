"""
pb_product_search: products, and optionally components, by name or description.
"""
import asyncio
from typing import Any, Dict, List

from pydantic import Field

from productboard_mcp.api.types import Page
from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.core.logging import logger
from productboard_mcp.utils.text import strip_html

from ..base import BaseTool, ToolParams
from .search_notes import MATCH_ALL


class SearchProductsParams(ToolParams):
    query: str = Field(min_length=1, description='Search query text ("*" matches everything)')
    include_components: bool = Field(
        default=True, alias="includeComponents", description="Include components in search results"
    )
    limit: int = Field(default=20, ge=1, le=100, description="Maximum number of results")
    offset: int = Field(default=0, ge=0, description="Number of results to skip")


def _entities(response: Any, entity_type: str) -> List[Dict[str, Any]]:
    return [
        {
            "id": item.get("id"),
            "name": item.get("name"),
            "description": strip_html(item.get("description")),
            "type": entity_type,
        }
        for item in Page.from_response(response).items
        if isinstance(item, dict)
    ]


def _matches(entity: Dict[str, Any], query: str) -> bool:
    if query == MATCH_ALL:
        return True
    term = query.lower()
    return term in str(entity.get("name") or "").lower() or term in entity["description"].lower()


class SearchProductsTool(BaseTool):
    name = "pb_product_search"
    description = "Search for products and components"
    params_model = SearchProductsParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.SEARCH.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires search access",
    )

    async def execute_internal(self, params: SearchProductsParams) -> Dict[str, Any]:
        logger.info("Searching products for {!r}", params.query)

        if params.include_components:
            products, components = await asyncio.gather(
                self.api_client.get("/products"),
                self.api_client.get("/components"),
            )
            entities = _entities(products, "product") + _entities(components, "component")
        else:
            entities = _entities(await self.api_client.get("/products"), "product")

        matched = [e for e in entities if _matches(e, params.query)]
        return {
            "success": True,
            "data": {
                "data": matched[params.offset:params.offset + params.limit],
                "total": len(matched),
                "offset": params.offset,
                "limit": params.limit,
            },
        }
