"""
Tool call service.

Resolves the named tool, checks the caller against its permission metadata,
then lets the tool validate its arguments and run.
"""
from typing import Any, Dict, List, Optional

from productboard_mcp.auth.permissions import CallerPermissions, check_access
from productboard_mcp.core.logging import log_context, logger
from productboard_mcp.tools.errors import PermissionDeniedError
from productboard_mcp.tools.registry import ToolRegistry


class ToolService:
    def __init__(self, registry: ToolRegistry, caller: CallerPermissions):
        self.registry = registry
        # default grants of the hosting environment
        self.caller = caller

    def list_tools(self, caller: Optional[CallerPermissions] = None) -> List[Dict[str, Any]]:
        return self.registry.list_available(caller or self.caller)

    async def call_tool(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        caller: Optional[CallerPermissions] = None,
    ) -> Dict[str, Any]:
        caller = caller or self.caller
        tool = self.registry.resolve(name)

        with log_context(tool_name=name):
            decision = check_access(caller, tool.permission_metadata)
            if not decision.allowed:
                logger.warning("Permission denied for {}: {}", name, decision.reason)
                raise PermissionDeniedError(
                    message=f"Permission denied for tool {name}: {decision.reason}",
                    tool_name=name,
                    missing_permissions=decision.missing_permissions,
                    required_access_level=decision.required_level.label,
                    caller_access_level=decision.caller_level.label,
                )

            logger.info("Executing tool {}", name)
            return await tool.execute(arguments)
