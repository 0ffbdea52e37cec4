from .permissions import (
    AccessDecision,
    AccessLevel,
    CallerPermissions,
    Permission,
    ToolPermissionMetadata,
    check_access,
    is_admissible,
    missing_permissions,
)
from .provider import AuthenticationManager, BearerTokenAuth, OAuth2TokenAuth

__all__ = [
    "AccessDecision",
    "AccessLevel",
    "CallerPermissions",
    "Permission",
    "ToolPermissionMetadata",
    "check_access",
    "is_admissible",
    "missing_permissions",
    "AuthenticationManager",
    "BearerTokenAuth",
    "OAuth2TokenAuth",
]
