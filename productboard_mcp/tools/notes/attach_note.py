from typing import Literal, Optional

from pydantic import Field

from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.core.logging import logger

from ..base import BaseTool, ToolParams


class AttachNoteParams(ToolParams):
    note_id: str = Field(alias="noteId", min_length=1, description="Note ID (UUID)")
    entity_id: str = Field(
        alias="entityId", min_length=1,
        description="ID of the feature, subfeature, product or component to link",
    )
    # informational only, the link endpoint is the same for every entity type
    entity_type: Optional[Literal["feature", "subfeature", "product", "component"]] = Field(
        default=None, alias="entityType"
    )


class AttachNoteTool(BaseTool):
    name = "pb_note_attach"
    description = "Link a note to a feature, product, component, or subfeature"
    params_model = AttachNoteParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.NOTES_WRITE.value}),
        minimum_access_level=AccessLevel.WRITE,
        description="Requires write access to notes",
    )

    async def execute_internal(self, params: AttachNoteParams) -> str:
        logger.info(
            "Linking note {} to {} {}", params.note_id, params.entity_type or "entity", params.entity_id
        )
        await self.api_client.post(f"/notes/{params.note_id}/links/{params.entity_id}")
        return f"Successfully linked note {params.note_id} to entity {params.entity_id}"
