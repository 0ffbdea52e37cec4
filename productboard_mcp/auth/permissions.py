"""
Access levels, permissions and the admissibility check for tool calls.

Access levels are ordinal: a caller at WRITE may run anything that needs READ.
Permissions are opaque capability tags; a tool declares the set it needs.
The two axes are checked and reported separately so a caller can tell
"wrong tier" from "missing capability".
"""
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import FrozenSet, Iterable, List, Optional, Union


class AccessLevel(IntEnum):
    READ = 0
    WRITE = 1
    DELETE = 2
    ADMIN = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: Union[str, int, "AccessLevel"]) -> "AccessLevel":
        if isinstance(value, AccessLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown access level: {value!r}") from None


class Permission(str, Enum):
    FEATURES_READ = "features:read"
    FEATURES_WRITE = "features:write"
    FEATURES_DELETE = "features:delete"
    NOTES_READ = "notes:read"
    NOTES_WRITE = "notes:write"
    NOTES_DELETE = "notes:delete"
    PRODUCTS_READ = "products:read"
    PRODUCTS_WRITE = "products:write"
    OBJECTIVES_READ = "objectives:read"
    OBJECTIVES_WRITE = "objectives:write"
    USERS_READ = "users:read"
    USERS_WRITE = "users:write"
    COMPANIES_READ = "companies:read"
    COMPANIES_WRITE = "companies:write"
    SEARCH = "search"
    ADMIN = "admin"


def _as_tags(values: Iterable[Union[str, Permission]]) -> FrozenSet[str]:
    return frozenset(v.value if isinstance(v, Permission) else str(v) for v in values)


@dataclass(frozen=True)
class ToolPermissionMetadata:
    """Requirements attached to a tool when it is registered."""

    required_permissions: FrozenSet[str] = frozenset()
    minimum_access_level: AccessLevel = AccessLevel.READ
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "required_permissions", _as_tags(self.required_permissions))
        object.__setattr__(self, "minimum_access_level", AccessLevel.parse(self.minimum_access_level))

    def to_dict(self) -> dict:
        return {
            "requiredPermissions": sorted(self.required_permissions),
            "minimumAccessLevel": self.minimum_access_level.label,
            "description": self.description,
        }


def _default_grants(level: AccessLevel) -> FrozenSet[str]:
    grants = {p.value for p in Permission if p.value.endswith(":read")}
    grants.add(Permission.SEARCH.value)
    if level >= AccessLevel.WRITE:
        grants |= {p.value for p in Permission if p.value.endswith(":write")}
    if level >= AccessLevel.DELETE:
        grants |= {p.value for p in Permission if p.value.endswith(":delete")}
    if level >= AccessLevel.ADMIN:
        grants.add(Permission.ADMIN.value)
    return frozenset(grants)


@dataclass(frozen=True)
class CallerPermissions:
    """Grants of whoever is invoking a tool. Supplied per call, never stored."""

    access_level: AccessLevel = AccessLevel.READ
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, "access_level", AccessLevel.parse(self.access_level))
        object.__setattr__(self, "permissions", _as_tags(self.permissions))

    @classmethod
    def for_access_level(cls, level: Union[str, AccessLevel]) -> "CallerPermissions":
        """Caller holding the default grant set of `level`."""
        level = AccessLevel.parse(level)
        return cls(access_level=level, permissions=_default_grants(level))

    @classmethod
    def from_settings(cls, access_level: str, permissions: Optional[str] = None) -> "CallerPermissions":
        tags = [p.strip() for p in (permissions or "").split(",") if p.strip()]
        if not tags:
            return cls.for_access_level(access_level)
        return cls(access_level=AccessLevel.parse(access_level), permissions=frozenset(tags))


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    access_level_ok: bool
    missing_permissions: List[str]
    required_level: AccessLevel
    caller_level: AccessLevel

    @property
    def reason(self) -> Optional[str]:
        if self.allowed:
            return None
        parts = []
        if not self.access_level_ok:
            parts.append(
                f"requires access level '{self.required_level.label}' "
                f"(caller has '{self.caller_level.label}')"
            )
        if self.missing_permissions:
            parts.append(f"missing permissions: {', '.join(self.missing_permissions)}")
        return "; ".join(parts)


def has_access_level(caller: CallerPermissions, metadata: ToolPermissionMetadata) -> bool:
    return caller.access_level >= metadata.minimum_access_level


def missing_permissions(caller: CallerPermissions, metadata: ToolPermissionMetadata) -> List[str]:
    """Required permissions the caller lacks, sorted. Ignores the access level."""
    return sorted(metadata.required_permissions - caller.permissions)


def is_admissible(caller: CallerPermissions, metadata: ToolPermissionMetadata) -> bool:
    return has_access_level(caller, metadata) and not missing_permissions(caller, metadata)


def check_access(caller: CallerPermissions, metadata: ToolPermissionMetadata) -> AccessDecision:
    level_ok = has_access_level(caller, metadata)
    missing = missing_permissions(caller, metadata)
    return AccessDecision(
        allowed=level_ok and not missing,
        access_level_ok=level_ok,
        missing_permissions=missing,
        required_level=metadata.minimum_access_level,
        caller_level=caller.access_level,
    )
