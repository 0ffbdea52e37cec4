from typing import Any, Dict, Literal, Optional

from pydantic import Field

from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata

from ..base import BaseTool, ToolParams


class ListKeyResultsParams(ToolParams):
    objective_id: Optional[str] = Field(default=None, description="Filter by objective ID")
    metric_type: Optional[Literal["number", "percentage", "currency"]] = Field(
        default=None, description="Filter by metric type"
    )
    limit: int = Field(default=100, ge=1, le=2000, description="Maximum number of key results")
    page_cursor: Optional[str] = Field(default=None, alias="pageCursor")


class ListKeyResultsTool(BaseTool):
    name = "pb_keyresult_list"
    description = "List key results with optional filtering"
    params_model = ListKeyResultsParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.OBJECTIVES_READ.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires read access to objectives",
    )

    async def execute_internal(self, params: ListKeyResultsParams) -> Dict[str, Any]:
        query = {
            "pageLimit": params.limit,
            "objective_id": params.objective_id,
            "metric_type": params.metric_type,
            "pageCursor": params.page_cursor,
        }
        response = await self.api_client.make_request("GET", "/key-results", params=query)
        return {"success": True, "data": response}
