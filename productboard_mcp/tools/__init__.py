"""
Productboard tools and their registration.
"""
from productboard_mcp.api.client import ProductboardAPIClient

from .base import BaseTool, EmptyParams, ToolParams, text_content
from .features import BulkUpdateFeaturesTool, GetFeatureTool, ListFeaturesTool
from .notes import AttachNoteTool, ListNotesTool
from .objectives import LinkFeatureToObjectiveTool, ListKeyResultsTool
from .products import ProductHierarchyTool
from .registry import ToolRegistry
from .search import GlobalSearchTool, SearchNotesTool, SearchProductsTool
from .users import CurrentUserTool

DEFAULT_TOOLS = [
    ListFeaturesTool,
    GetFeatureTool,
    BulkUpdateFeaturesTool,
    ListNotesTool,
    AttachNoteTool,
    LinkFeatureToObjectiveTool,
    ListKeyResultsTool,
    ProductHierarchyTool,
    GlobalSearchTool,
    SearchNotesTool,
    SearchProductsTool,
    CurrentUserTool,
]


def register_default_tools(registry: ToolRegistry, client: ProductboardAPIClient) -> ToolRegistry:
    for tool_cls in DEFAULT_TOOLS:
        registry.register(tool_cls(client))
    return registry


__all__ = [
    "BaseTool",
    "ToolParams",
    "EmptyParams",
    "text_content",
    "ToolRegistry",
    "DEFAULT_TOOLS",
    "register_default_tools",
]
