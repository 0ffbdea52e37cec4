"""
Tool registry: name-keyed lookup, filled once at startup.
"""
from typing import Any, Dict, Iterator, List, Optional

from productboard_mcp.auth.permissions import CallerPermissions
from productboard_mcp.core.logging import logger

from .base import BaseTool
from .errors import DuplicateToolError, ToolNotFoundError


class ToolRegistry:
    def __init__(self, *, allow_overwrite: bool = False):
        self.allow_overwrite = allow_overwrite
        self._tools: Dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        if tool.name in self._tools:
            if not self.allow_overwrite:
                raise DuplicateToolError(tool.name)
            logger.warning("Overwriting registered tool {}", tool.name)
            # keep the original registration slot
        self._tools[tool.name] = tool
        logger.debug("Registered tool {}", tool.name)

    def resolve(self, name: str) -> BaseTool:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(list(self._tools.values()))

    def list_tools(self) -> List[Dict[str, Any]]:
        """Public descriptors of every tool, in registration order."""
        return [tool.get_metadata() for tool in self._tools.values()]

    def list_available(self, caller: CallerPermissions) -> List[Dict[str, Any]]:
        return [tool.get_metadata() for tool in self._tools.values() if tool.is_available_for(caller)]
