"""
Authentication providers for the Productboard API.

A provider owns the credential and hands out per-request auth headers. When no
credential is configured it returns an empty map, and the client reports the
resulting 401 as a configuration problem rather than a network one.
"""
import asyncio
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

import httpx

from productboard_mcp.api.errors import APIAuthenticationError
from productboard_mcp.core.logging import logger


class AuthenticationManager(ABC):
    """Produces auth headers for outbound requests."""

    @abstractmethod
    async def get_auth_headers(self) -> Dict[str, str]:
        """Current auth headers; refreshes an expiring credential first."""
        pass

    @abstractmethod
    def has_credential(self) -> bool:
        pass


class BearerTokenAuth(AuthenticationManager):
    """Static API token sent as `Authorization: Bearer <token>`."""

    def __init__(self, token: Optional[str]):
        self._token = (token or "").strip()

    async def get_auth_headers(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def has_credential(self) -> bool:
        return bool(self._token)


class OAuth2TokenAuth(AuthenticationManager):
    """
    OAuth2 refresh-token grant.

    The access token is cached until `expires_in` minus `refresh_skew`
    seconds; concurrent callers share one refresh through a lock.
    """

    def __init__(
        self,
        *,
        token_url: str,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        refresh_skew: float = 60.0,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self.refresh_skew = refresh_skew
        self.timeout = timeout
        self._transport = transport
        self._clock = clock

        self._access_token: Optional[str] = None
        self._expires_at: float = 0.0
        self._lock = asyncio.Lock()

    def has_credential(self) -> bool:
        return bool(self._refresh_token)

    def _is_fresh(self) -> bool:
        return bool(self._access_token) and self._clock() < self._expires_at - self.refresh_skew

    async def get_auth_headers(self) -> Dict[str, str]:
        if not self.has_credential():
            return {}
        if not self._is_fresh():
            async with self._lock:
                # another caller may have refreshed while we waited
                if not self._is_fresh():
                    await self._refresh()
        return {"Authorization": f"Bearer {self._access_token}"}

    async def _refresh(self) -> None:
        logger.info("Refreshing Productboard OAuth2 access token")
        payload = {
            "grant_type": "refresh_token",
            "refresh_token": self._refresh_token,
            "client_id": self.client_id,
            "client_secret": self._client_secret,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.token_url, data=payload)
        except httpx.RequestError as e:
            raise APIAuthenticationError(
                f"OAuth2 token refresh failed: {type(e).__name__}", status_code=None
            ) from e

        if response.status_code != 200:
            raise APIAuthenticationError(
                f"OAuth2 token refresh rejected with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise APIAuthenticationError("OAuth2 token response is not valid JSON", status_code=None) from e
        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise APIAuthenticationError("OAuth2 token response has no access_token", status_code=None)

        self._access_token = access_token
        self._expires_at = self._clock() + float(data.get("expires_in") or 3600)
        # providers may rotate the refresh token
        if data.get("refresh_token"):
            self._refresh_token = data["refresh_token"]
        logger.debug("OAuth2 access token refreshed, expires in {}s", data.get("expires_in"))


