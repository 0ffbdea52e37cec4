"""
Tool listing and invocation.

Errors map onto HTTP statuses: unknown tool 404, permission denied 403,
bad arguments 422, failure talking to Productboard 502 (with its error kind).
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from productboard_mcp.auth.permissions import CallerPermissions
from productboard_mcp.core.dependencies import get_caller, get_tool_service, require_api_token
from productboard_mcp.schemas import ToolCallResponse, ToolListResponse
from productboard_mcp.services.tool_service import ToolService
from productboard_mcp.tools.errors import (
    PermissionDeniedError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolValidationError,
)

router = APIRouter(dependencies=[Depends(require_api_token)])


def _error_detail(error: str, exc: ToolError, **extra: Any) -> Dict[str, Any]:
    detail = {"error": error, "message": exc.message, "tool": exc.tool_name}
    detail.update(extra)
    return detail


@router.get("/tools", response_model=ToolListResponse)
async def list_tools(
    service: ToolService = Depends(get_tool_service),
    caller: CallerPermissions = Depends(get_caller),
):
    tools = service.list_tools(caller)
    return {"tools": tools, "count": len(tools)}


@router.post("/tools/{name}", response_model=ToolCallResponse)
async def call_tool(
    name: str,
    arguments: Optional[Dict[str, Any]] = Body(default=None),
    service: ToolService = Depends(get_tool_service),
    caller: CallerPermissions = Depends(get_caller),
):
    try:
        return await service.call_tool(name, arguments or {}, caller)
    except ToolNotFoundError as e:
        raise HTTPException(status_code=404, detail=_error_detail("tool_not_found", e))
    except PermissionDeniedError as e:
        raise HTTPException(
            status_code=403,
            detail=_error_detail(
                "permission_denied",
                e,
                missing_permissions=e.missing_permissions,
                required_access_level=e.required_access_level,
                caller_access_level=e.caller_access_level,
            ),
        )
    except ToolValidationError as e:
        raise HTTPException(
            status_code=422, detail=_error_detail("validation_error", e, errors=e.errors)
        )
    except ToolExecutionError as e:
        raise HTTPException(
            status_code=502,
            detail=_error_detail("upstream_error", e, kind=e.kind.value if e.kind else None),
        )
