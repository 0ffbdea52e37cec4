"""
pb_feature_bulk_update: apply several feature updates in one call.

Updates run one after another; a failing update is reported in its slot and
does not stop the rest.
"""
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from productboard_mcp.api.types import BatchOperation
from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.core.logging import logger

from ..base import BaseTool, ToolParams


class FeatureUpdate(ToolParams):
    id: str = Field(min_length=1, description="Feature ID (UUID)")
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = Field(default=None, description="Status name, e.g. 'in_progress'")
    owner_email: Optional[str] = Field(default=None, alias="ownerEmail")
    archived: Optional[bool] = None

    @model_validator(mode="after")
    def check_has_changes(self):
        if not self.changes():
            raise ValueError(f"update for feature {self.id} changes nothing")
        return self

    def changes(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.name is not None:
            data["name"] = self.name
        if self.description is not None:
            data["description"] = self.description
        if self.status is not None:
            data["status"] = {"name": self.status}
        if self.owner_email is not None:
            data["owner"] = {"email": self.owner_email}
        if self.archived is not None:
            data["archived"] = self.archived
        return data


class BulkUpdateFeaturesParams(ToolParams):
    updates: List[FeatureUpdate] = Field(min_length=1, max_length=100)


class BulkUpdateFeaturesTool(BaseTool):
    name = "pb_feature_bulk_update"
    description = "Update several features; each update succeeds or fails on its own"
    params_model = BulkUpdateFeaturesParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.FEATURES_WRITE.value}),
        minimum_access_level=AccessLevel.WRITE,
        description="Requires write access to features",
    )

    async def execute_internal(self, params: BulkUpdateFeaturesParams) -> Dict[str, Any]:
        operations = [
            BatchOperation("PATCH", f"/features/{update.id}", body={"data": update.changes()})
            for update in params.updates
        ]
        results = await self.api_client.run_batch(operations)

        succeeded = sum(1 for r in results if r.success)
        logger.info("Bulk feature update: {}/{} succeeded", succeeded, len(results))
        return {
            "total": len(results),
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
            "results": [
                {"id": update.id, **result.to_dict()}
                for update, result in zip(params.updates, results)
            ],
        }
