"""
pb_user_current: who the configured token belongs to.

The API has no "me" endpoint, so the answer comes from the payload of the
bearer JWT. No request is sent to the service.
"""
import base64
import binascii
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from productboard_mcp.auth.permissions import AccessLevel, Permission, ToolPermissionMetadata
from productboard_mcp.core.logging import logger

from ..base import BaseTool, EmptyParams

TOKEN_NOTE = (
    "User information extracted from API token. "
    "Productboard API does not provide a /me endpoint."
)


class TokenDecodeError(ValueError):
    pass


def decode_jwt_payload(token: str) -> Dict[str, Any]:
    parts = token.split(".")
    if len(parts) != 3:
        raise TokenDecodeError("Invalid token format")
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise TokenDecodeError(f"Unable to decode token payload: {e}") from e
    if not isinstance(payload, dict):
        raise TokenDecodeError("Token payload is not an object")
    return payload


def _issued_at(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        issued = datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return issued.isoformat().replace("+00:00", "Z")


class CurrentUserTool(BaseTool):
    name = "pb_user_current"
    description = "Get current authenticated user information from API token"
    params_model = EmptyParams
    permission_metadata = ToolPermissionMetadata(
        required_permissions=frozenset({Permission.USERS_READ.value}),
        minimum_access_level=AccessLevel.READ,
        description="Requires read access to user information",
    )

    async def execute_internal(self, params: EmptyParams) -> Dict[str, Any]:
        headers = await self.api_client.auth_headers()
        authorization = headers.get("Authorization")
        if not authorization:
            return {"success": False, "error": "No authentication token available"}

        token = authorization[len("Bearer "):] if authorization.startswith("Bearer ") else authorization
        try:
            payload = decode_jwt_payload(token)
        except TokenDecodeError as e:
            logger.warning("Could not read user from token: {}", e)
            return {"success": False, "error": str(e)}

        return {
            "success": True,
            "data": {
                "id": payload.get("user_id") or payload.get("sub"),
                "role": payload.get("role"),
                "spaceId": payload.get("space_id"),
                "region": payload.get("region"),
                "authenticated": True,
                "tokenIssuer": payload.get("iss"),
                "tokenIssuedAt": _issued_at(payload.get("iat")),
                "note": TOKEN_NOTE,
            },
        }
