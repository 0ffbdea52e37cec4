"""
Shared request-execution context.

One instance is built at startup and handed to the API client by reference,
so tests can build isolated contexts instead of patching globals.
"""
from dataclasses import dataclass
from typing import Optional

import httpx

from productboard_mcp.auth.provider import AuthenticationManager, BearerTokenAuth, OAuth2TokenAuth
from productboard_mcp.core.config import Settings
from productboard_mcp.middleware.rate_limiter import RateLimiter


@dataclass
class ClientContext:
    auth: AuthenticationManager
    rate_limiter: RateLimiter


def build_auth_manager(
    config: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AuthenticationManager:
    if config.productboard_auth_type == "oauth2":
        return OAuth2TokenAuth(
            token_url=config.productboard_oauth_token_url or "",
            client_id=config.productboard_oauth_client_id or "",
            client_secret=(
                config.productboard_oauth_client_secret.get_secret_value()
                if config.productboard_oauth_client_secret else ""
            ),
            refresh_token=(
                config.productboard_oauth_refresh_token.get_secret_value()
                if config.productboard_oauth_refresh_token else ""
            ),
            timeout=config.request_timeout_seconds,
            transport=transport,
        )

    token = config.productboard_api_token.get_secret_value() if config.productboard_api_token else None
    return BearerTokenAuth(token)


def build_client_context(
    config: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ClientContext:
    return ClientContext(
        auth=build_auth_manager(config, transport=transport),
        rate_limiter=RateLimiter(
            max_requests=config.rate_limit_max_requests,
            time_window=config.rate_limit_window_seconds,
        ),
    )
