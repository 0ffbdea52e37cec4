from typing import Any, Dict

from pydantic import Field

from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.core.logging import logger

from ..base import BaseTool, ToolParams


class LinkFeatureParams(ToolParams):
    feature_id: str = Field(alias="featureId", min_length=1, description="Feature ID (UUID)")
    objective_id: str = Field(alias="objectiveId", min_length=1, description="Objective ID (UUID)")


class LinkFeatureToObjectiveTool(BaseTool):
    name = "pb_objective_link_feature"
    description = "Link a feature to an objective"
    params_model = LinkFeatureParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.OBJECTIVES_WRITE.value}),
        minimum_access_level=AccessLevel.WRITE,
        description="Requires write access to objectives",
    )

    async def execute_internal(self, params: LinkFeatureParams) -> Dict[str, Any]:
        logger.info("Linking feature {} to objective {}", params.feature_id, params.objective_id)
        response = await self.api_client.post(
            f"/features/{params.feature_id}/links/objectives/{params.objective_id}", {}
        )
        return {"success": True, "data": response}
