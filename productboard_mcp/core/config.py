"""
Configuration management.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import SecretStr
from typing import Optional, Literal


class Settings(BaseSettings):
    """Application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Runtime environment
    app_env: Literal["dev", "prod"] = "dev"
    debug: bool = True

    # HTTP surface
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_token: SecretStr = SecretStr("")  # empty = no token check (dev only)

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_dir: Optional[str] = None  # None = stdout only

    # Productboard API
    productboard_base_url: str = "https://api.productboard.com"
    productboard_api_version: str = "1"
    productboard_api_token: Optional[SecretStr] = None
    productboard_auth_type: Literal["bearer", "oauth2"] = "bearer"

    # OAuth2 refresh-token grant
    productboard_oauth_token_url: Optional[str] = None
    productboard_oauth_client_id: Optional[str] = None
    productboard_oauth_client_secret: Optional[SecretStr] = None
    productboard_oauth_refresh_token: Optional[SecretStr] = None

    # Transport / retries
    request_timeout_seconds: float = 10.0
    retry_attempts: int = 3
    retry_initial_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 30.0

    # Outbound rate budget (shared by every call)
    rate_limit_max_requests: int = 60
    rate_limit_window_seconds: float = 60.0

    # Pagination
    pagination_page_limit: int = 100
    pagination_max_pages: int = 100

    # Caller grants supplied by the hosting environment
    caller_access_level: Literal["read", "write", "delete", "admin"] = "read"
    caller_permissions: str = ""  # comma separated, e.g. "features:read,notes:write"


settings = Settings()


def validate_settings(config: Optional[Settings] = None) -> None:
    """Basic environment checks."""
    config = config or settings

    if config.app_env == "prod" and config.debug:
        raise RuntimeError("DEBUG must be False in production")

    if config.app_env == "prod" and not config.api_token.get_secret_value():
        raise RuntimeError("API_TOKEN must be set in production (APP_ENV=prod)")

    if config.productboard_auth_type == "oauth2":
        if not config.productboard_oauth_token_url:
            raise RuntimeError("Missing PRODUCTBOARD_OAUTH_TOKEN_URL for oauth2 auth")
        if not config.productboard_oauth_client_id or not config.productboard_oauth_client_secret:
            raise RuntimeError("Missing PRODUCTBOARD_OAUTH_CLIENT_ID / PRODUCTBOARD_OAUTH_CLIENT_SECRET")
        if not config.productboard_oauth_refresh_token:
            raise RuntimeError("Missing PRODUCTBOARD_OAUTH_REFRESH_TOKEN")
    elif config.app_env == "prod":
        token = config.productboard_api_token.get_secret_value() if config.productboard_api_token else ""
        if not token:
            raise RuntimeError("PRODUCTBOARD_API_TOKEN must be set in production (APP_ENV=prod)")

    if config.retry_attempts < 1:
        raise RuntimeError("RETRY_ATTEMPTS must be at least 1")
    if config.rate_limit_max_requests < 1:
        raise RuntimeError("RATE_LIMIT_MAX_REQUESTS must be at least 1")

    return None
