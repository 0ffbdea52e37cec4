"""
pb_product_hierarchy: products with their components.

There is no hierarchy endpoint; products and components are fetched
concurrently and joined on `component.parent.product.id`.
"""
import asyncio
from typing import Any, Dict, List, Optional

from pydantic import Field

from productboard_mcp.api.types import Page
from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.utils.text import strip_html

from ..base import BaseTool, ToolParams, text_content


class ProductHierarchyParams(ToolParams):
    product_id: Optional[str] = Field(
        default=None, alias="productId",
        description="Only this product (defaults to all products)",
    )


def _owner(entity: Dict[str, Any]) -> Optional[str]:
    return (entity.get("owner") or {}).get("email")


def _parent_product_id(component: Dict[str, Any]) -> Optional[str]:
    return ((component.get("parent") or {}).get("product") or {}).get("id")


def build_product_node(product: Dict[str, Any], components: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "id": product.get("id"),
        "name": product.get("name"),
        "description": strip_html(product.get("description")),
        "type": "product",
        "owner": _owner(product),
        "components": [
            {
                "id": c.get("id"),
                "name": c.get("name"),
                "description": strip_html(c.get("description")),
                "type": "component",
                "owner": _owner(c),
            }
            for c in components
            if _parent_product_id(c) == product.get("id")
        ],
    }


def format_hierarchy(hierarchy: List[Dict[str, Any]]) -> str:
    if not hierarchy:
        return "No products found."

    lines = [f"Product Hierarchy ({len(hierarchy)} products):", ""]
    for i, product in enumerate(hierarchy, 1):
        lines.append(f"{i}. {product['name']}")
        lines.append(f"   ID: {product['id']}")
        if product["owner"]:
            lines.append(f"   Owner: {product['owner']}")
        if product["description"]:
            lines.append(f"   Description: {product['description']}")
        components = product["components"]
        if components:
            lines.append(f"   Components ({len(components)}):")
            for j, comp in enumerate(components, 1):
                lines.append(f"     {j}. {comp['name']} ({comp['id']})")
                if comp["owner"]:
                    lines.append(f"        Owner: {comp['owner']}")
        else:
            lines.append("   Components: None")
        lines.append("")
    return "\n".join(lines)


class ProductHierarchyTool(BaseTool):
    name = "pb_product_hierarchy"
    description = "Get the product hierarchy with components"
    params_model = ProductHierarchyParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.PRODUCTS_READ.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires read access to products",
    )

    async def execute_internal(self, params: ProductHierarchyParams) -> Dict[str, Any]:
        products_response, components_response = await asyncio.gather(
            self.api_client.get("/products"),
            self.api_client.get("/components"),
        )
        products = [p for p in Page.from_response(products_response).items if isinstance(p, dict)]
        components = [c for c in Page.from_response(components_response).items if isinstance(c, dict)]

        if params.product_id:
            product = next((p for p in products if p.get("id") == params.product_id), None)
            if product is None:
                return text_content(f"Product not found: {params.product_id}")
            products = [product]

        return text_content(format_hierarchy([build_product_node(p, components) for p in products]))
