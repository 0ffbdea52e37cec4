from .product_hierarchy import ProductHierarchyTool

__all__ = ["ProductHierarchyTool"]
