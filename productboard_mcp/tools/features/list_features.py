"""
pb_feature_list: list features with filtering the API does not offer.

Only `parent.id` is filtered server side; status, owner, tags and free-text
search, sorting and offset slicing happen on the fetched page.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from productboard_mcp.api.types import Page
from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.core.logging import logger
from productboard_mcp.utils.text import strip_html

from ..base import BaseTool, ToolParams, text_content

MAX_PAGE_LIMIT = 2000

FeatureStatus = Literal["new", "in_progress", "validation", "done", "archived"]
SortField = Literal["created_at", "updated_at", "name", "priority"]

_SORT_KEYS = {
    "name": ("name", ""),
    "created_at": ("createdAt", ""),
    "updated_at": ("updatedAt", ""),
    "priority": ("priority", 0),
}


class ListFeaturesParams(ToolParams):
    status: Optional[FeatureStatus] = Field(default=None, description="Filter by feature status")
    product_id: Optional[str] = Field(default=None, description="Filter by product ID")
    component_id: Optional[str] = Field(default=None, description="Filter by component ID")
    owner_email: Optional[str] = Field(default=None, description="Filter by owner email")
    tags: Optional[List[str]] = Field(
        default=None, description="Filter by tags (features must have all specified tags)"
    )
    search: Optional[str] = Field(default=None, description="Search in feature names and descriptions")
    limit: int = Field(default=20, ge=1, le=1000, description="Number of results per page")
    offset: int = Field(default=0, ge=0, description="Number of results to skip")
    sort: SortField = Field(default="created_at", description="Sort field")
    order: Literal["asc", "desc"] = Field(default="desc", description="Sort order")


def _lower(value: Any) -> str:
    return str(value).lower() if value else ""


def _tag_names(feature: Dict[str, Any]) -> List[str]:
    tags = feature.get("tags")
    if not isinstance(tags, list):
        return []
    return [_lower(t.get("name") if isinstance(t, dict) else t) for t in tags]


def filter_features(features: List[Dict[str, Any]], params: ListFeaturesParams) -> List[Dict[str, Any]]:
    result = features
    if params.status:
        result = [f for f in result if _lower((f.get("status") or {}).get("name")) == params.status]
    if params.owner_email:
        wanted = params.owner_email.lower()
        result = [f for f in result if _lower((f.get("owner") or {}).get("email")) == wanted]
    if params.search:
        term = params.search.lower()
        result = [
            f for f in result
            if term in _lower(f.get("name")) or term in _lower(f.get("description"))
        ]
    if params.tags:
        wanted_tags = [t.lower() for t in params.tags]
        result = [f for f in result if all(t in _tag_names(f) for t in wanted_tags)]
    return result


def sort_features(features: List[Dict[str, Any]], sort: str, order: str) -> List[Dict[str, Any]]:
    key, default = _SORT_KEYS[sort]
    return sorted(features, key=lambda f: f.get(key) or default, reverse=(order == "desc"))


def summarize_feature(feature: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": feature.get("id"),
        "name": feature.get("name") or "Untitled Feature",
        "description": strip_html(feature.get("description")),
        "status": (feature.get("status") or {}).get("name") or "Unknown",
        "owner": (feature.get("owner") or {}).get("email") or "Unassigned",
        "createdAt": feature.get("createdAt"),
        "updatedAt": feature.get("updatedAt"),
    }


class ListFeaturesTool(BaseTool):
    name = "pb_feature_list"
    description = "List features with optional filtering and pagination"
    params_model = ListFeaturesParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.FEATURES_READ.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires read access to features",
    )

    async def execute_internal(self, params: ListFeaturesParams) -> Dict[str, Any]:
        query: Dict[str, Any] = {"pageLimit": min(params.limit, MAX_PAGE_LIMIT)}
        # products and components are both parents in the feature tree
        parent_id = params.component_id or params.product_id
        if parent_id:
            query["parent.id"] = parent_id

        logger.debug("Fetching features: {}", query)
        response = await self.api_client.get("/features", params=query)
        features = [f for f in Page.from_response(response).items if isinstance(f, dict)]

        matched = sort_features(filter_features(features, params), params.sort, params.order)
        shown = [summarize_feature(f) for f in matched[params.offset:params.offset + params.limit]]

        if not shown:
            return text_content("No features found.")

        lines = [
            f"Found {len(matched)} matching features (from {len(features)} total), "
            f"showing {len(shown)}:",
            "",
        ]
        for i, f in enumerate(shown, 1):
            lines.extend([
                f"{i}. {f['name']}",
                f"   ID: {f['id']}",
                f"   Status: {f['status']}",
                f"   Owner: {f['owner']}",
                f"   Description: {f['description'] or 'No description'}",
                "",
            ])
        return text_content("\n".join(lines).rstrip() + "\n")
