"""
Tool base class.

A tool is one named, permission-gated operation mapping onto Productboard API
calls. Parameters are declared as a pydantic model; its JSON schema is what
callers see in the tool listing.
"""
import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, ValidationError

from productboard_mcp.api.client import ProductboardAPIClient
from productboard_mcp.api.errors import ProductboardAPIError
from productboard_mcp.auth.permissions import (
    AccessLevel,
    CallerPermissions,
    ToolPermissionMetadata,
    is_admissible,
    missing_permissions,
)
from productboard_mcp.core.logging import logger

from .errors import ToolExecutionError, ToolValidationError


class ToolParams(BaseModel):
    """Base for tool parameter models."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class EmptyParams(ToolParams):
    pass


def text_content(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def _is_content_envelope(result: Any) -> bool:
    return isinstance(result, dict) and isinstance(result.get("content"), list)


class BaseTool(ABC):
    """Base class for every Productboard tool."""

    name: ClassVar[str]
    description: ClassVar[str]
    params_model: ClassVar[Type[ToolParams]] = EmptyParams
    permission_metadata: ClassVar[ToolPermissionMetadata] = ToolPermissionMetadata()

    def __init__(self, api_client: ProductboardAPIClient):
        self.api_client = api_client

    @property
    def parameters(self) -> Dict[str, Any]:
        return self.params_model.model_json_schema(by_alias=True)

    def validate_params(self, arguments: Optional[Dict[str, Any]]) -> ToolParams:
        try:
            return self.params_model.model_validate(arguments or {})
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc']) or 'params'}: {err['msg']}"
                for err in e.errors()
            ]
            raise ToolValidationError(
                f"Invalid parameters for tool {self.name}",
                tool_name=self.name,
                errors=errors,
            ) from e

    async def execute(self, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        params = self.validate_params(arguments)
        try:
            result = await self.execute_internal(params)
        except ProductboardAPIError as e:
            logger.warning("Tool {} failed: {} ({})", self.name, e, e.kind.value)
            raise ToolExecutionError(
                f"Tool {self.name} execution failed: {e.message}",
                tool_name=self.name,
                cause=e,
            ) from e
        return self.format_response(result)

    @abstractmethod
    async def execute_internal(self, params: Any) -> Any:
        """Tool-specific logic; receives validated params."""
        pass

    def format_response(self, result: Any) -> Dict[str, Any]:
        """Wrap `result` in the text content envelope unless it already is one."""
        if _is_content_envelope(result):
            return result
        if isinstance(result, str):
            return text_content(result)
        return text_content(json.dumps(result, indent=2, ensure_ascii=False, default=str))

    def get_metadata(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters,
            "permissions": self.permission_metadata.to_dict(),
        }

    def is_available_for(self, caller: CallerPermissions) -> bool:
        return is_admissible(caller, self.permission_metadata)

    def get_missing_permissions(self, caller: CallerPermissions) -> list:
        return missing_permissions(caller, self.permission_metadata)

    @property
    def required_access_level(self) -> AccessLevel:
        return self.permission_metadata.minimum_access_level
