"""
FastAPI Dependencies
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from productboard_mcp.auth.permissions import CallerPermissions
from productboard_mcp.core.config import Settings
from productboard_mcp.services.tool_service import ToolService


def _extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip()
    return None


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def require_api_token(
    x_api_token: Optional[str] = Header(default=None, alias="X-API-Token"),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    config: Settings = Depends(get_settings),
):
    expected = config.api_token.get_secret_value() if config.api_token else ""
    if not expected:
        return
    provided = x_api_token or _extract_bearer(authorization)
    if not provided or provided != expected:
        raise HTTPException(status_code=401, detail="Invalid or missing API Token")


def get_tool_service(request: Request) -> ToolService:
    return request.app.state.tool_service


def get_caller(service: ToolService = Depends(get_tool_service)) -> CallerPermissions:
    # grants come from the hosting environment, never from request headers
    return service.caller
