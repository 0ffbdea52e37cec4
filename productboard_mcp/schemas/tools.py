"""
Tool listing / tool call payloads.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolPermissionsInfo(BaseModel):
    requiredPermissions: List[str] = Field(default_factory=list)
    minimumAccessLevel: str
    description: str = ""


class ToolDescriptor(BaseModel):
    name: str
    description: str
    inputSchema: Dict[str, Any]
    permissions: ToolPermissionsInfo


class ToolListResponse(BaseModel):
    tools: List[ToolDescriptor]
    count: int


class ContentItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "text"
    text: Optional[str] = None


class ToolCallResponse(BaseModel):
    content: List[ContentItem]


class ErrorResponse(BaseModel):
    error: str
    message: str
    tool: Optional[str] = None
    kind: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
