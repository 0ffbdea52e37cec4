"""Tool-level error taxonomy.

Kept apart from `api.errors`: these describe the call itself (unknown tool,
bad arguments, caller not allowed), not what the service answered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from productboard_mcp.api.errors import ErrorKind


@dataclass(eq=False)
class ToolError(Exception):
    message: str
    tool_name: Optional[str] = None
    details: Optional[dict[str, Any]] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ToolNotFoundError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(message=f"Unknown tool: {tool_name}", tool_name=tool_name)


class DuplicateToolError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(message=f"Tool already registered: {tool_name}", tool_name=tool_name)


class ToolValidationError(ToolError):
    def __init__(self, message: str, *, tool_name: str, errors: Optional[List[str]] = None):
        super().__init__(message=message, tool_name=tool_name, details={"errors": list(errors or [])})

    @property
    def errors(self) -> List[str]:
        return (self.details or {}).get("errors", [])


class ToolExecutionError(ToolError):
    """A tool failed while talking to the service. Keeps the service error kind."""

    def __init__(self, message: str, *, tool_name: str, cause: Optional[BaseException] = None):
        kind = getattr(cause, "kind", None)
        super().__init__(
            message=message,
            tool_name=tool_name,
            details={"kind": kind.value if isinstance(kind, ErrorKind) else None},
        )
        self.cause = cause

    @property
    def kind(self) -> Optional[ErrorKind]:
        kind = getattr(self.cause, "kind", None)
        return kind if isinstance(kind, ErrorKind) else None


@dataclass(eq=False)
class PermissionDeniedError(ToolError):
    """Caller may not run the tool. Never retried, never a service error."""

    missing_permissions: List[str] = field(default_factory=list)
    required_access_level: Optional[str] = None
    caller_access_level: Optional[str] = None
