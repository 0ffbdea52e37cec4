from .global_search import GlobalSearchTool
from .search_notes import SearchNotesTool
from .search_products import SearchProductsTool

__all__ = ["GlobalSearchTool", "SearchNotesTool", "SearchProductsTool"]
