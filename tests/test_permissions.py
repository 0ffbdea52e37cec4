"""
Permission gate: access-level ordering plus required permission tags.
"""
import pytest

from productboard_mcp.auth.permissions import (
    AccessLevel,
    CallerPermissions,
    Permission,
    ToolPermissionMetadata,
    check_access,
    has_access_level,
    is_admissible,
    missing_permissions,
)

NOTES_WRITE = ToolPermissionMetadata(
    required_permissions=frozenset({Permission.NOTES_WRITE.value}),
    minimum_access_level=AccessLevel.WRITE,
    description="Requires write access to notes",
)


class TestAccessLevel:
    def test_total_order(self):
        assert AccessLevel.READ < AccessLevel.WRITE < AccessLevel.DELETE < AccessLevel.ADMIN

    @pytest.mark.parametrize("value,expected", [("read", AccessLevel.READ), ("ADMIN", AccessLevel.ADMIN), (2, AccessLevel.DELETE)])
    def test_parse(self, value, expected):
        assert AccessLevel.parse(value) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            AccessLevel.parse("owner")

    def test_label(self):
        assert AccessLevel.WRITE.label == "write"


class TestDefaultGrants:
    def test_read(self):
        caller = CallerPermissions.for_access_level("read")
        assert "features:read" in caller.permissions
        assert "search" in caller.permissions
        assert "features:write" not in caller.permissions

    def test_write_adds_write_tags(self):
        caller = CallerPermissions.for_access_level(AccessLevel.WRITE)
        assert {"notes:write", "notes:read"} <= caller.permissions
        assert "notes:delete" not in caller.permissions

    def test_admin_has_everything(self):
        caller = CallerPermissions.for_access_level("admin")
        assert {p.value for p in Permission} <= caller.permissions

    def test_explicit_permissions_from_settings(self):
        caller = CallerPermissions.from_settings("write", "features:read, notes:write")
        assert caller.access_level is AccessLevel.WRITE
        assert caller.permissions == frozenset({"features:read", "notes:write"})

    def test_empty_permissions_fall_back_to_defaults(self):
        caller = CallerPermissions.from_settings("read", "")
        assert caller == CallerPermissions.for_access_level("read")


class TestCheckAccess:
    def test_admitted(self):
        caller = CallerPermissions(AccessLevel.WRITE, frozenset({"notes:write"}))
        decision = check_access(caller, NOTES_WRITE)
        assert decision.allowed
        assert decision.reason is None

    def test_level_too_low(self):
        caller = CallerPermissions(AccessLevel.READ, frozenset({"notes:write"}))
        decision = check_access(caller, NOTES_WRITE)
        assert not decision.allowed
        assert not decision.access_level_ok
        assert decision.missing_permissions == []
        assert "requires access level 'write'" in decision.reason

    def test_missing_tag(self):
        caller = CallerPermissions(AccessLevel.ADMIN, frozenset({"notes:read"}))
        decision = check_access(caller, NOTES_WRITE)
        assert not decision.allowed
        assert decision.access_level_ok
        assert decision.missing_permissions == ["notes:write"]
        assert "missing permissions: notes:write" in decision.reason

    def test_missing_permissions_sorted(self):
        metadata = ToolPermissionMetadata(
            required_permissions=frozenset({"search", "features:read", "notes:read"}),
        )
        caller = CallerPermissions(AccessLevel.READ, frozenset())
        assert missing_permissions(caller, metadata) == ["features:read", "notes:read", "search"]

    @pytest.mark.parametrize("level", list(AccessLevel))
    @pytest.mark.parametrize("required", list(AccessLevel))
    def test_admissible_iff_level_and_tags(self, level, required):
        metadata = ToolPermissionMetadata(
            required_permissions=frozenset({"features:read"}),
            minimum_access_level=required,
        )
        with_tag = CallerPermissions(level, frozenset({"features:read"}))
        without_tag = CallerPermissions(level, frozenset())

        assert is_admissible(with_tag, metadata) == (level >= required)
        assert is_admissible(without_tag, metadata) is False
        assert has_access_level(without_tag, metadata) == (level >= required)

    def test_metadata_to_dict(self):
        assert NOTES_WRITE.to_dict() == {
            "requiredPermissions": ["notes:write"],
            "minimumAccessLevel": "write",
            "description": "Requires write access to notes",
        }

    def test_enum_tags_normalized(self):
        metadata = ToolPermissionMetadata(required_permissions=[Permission.SEARCH])
        assert metadata.required_permissions == frozenset({"search"})


def test_write_caller_missing_write_tag():
    caller = CallerPermissions(AccessLevel.WRITE, frozenset({"features:read"}))
    metadata = ToolPermissionMetadata(
        required_permissions=frozenset({"features:read", "features:write"}),
        minimum_access_level=AccessLevel.READ,
    )

    assert is_admissible(caller, metadata) is False
    assert missing_permissions(caller, metadata) == ["features:write"]
