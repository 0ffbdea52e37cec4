from typing import Any

from pydantic import Field

from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata

from ..base import BaseTool, ToolParams


class GetFeatureParams(ToolParams):
    feature_id: str = Field(alias="featureId", min_length=1, description="Feature ID (UUID)")


class GetFeatureTool(BaseTool):
    name = "pb_feature_get"
    description = "Get a single feature by ID"
    params_model = GetFeatureParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.FEATURES_READ.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires read access to features",
    )

    async def execute_internal(self, params: GetFeatureParams) -> Any:
        response = await self.api_client.get(f"/features/{params.feature_id}")
        if isinstance(response, dict) and "data" in response:
            return response["data"]
        return response
