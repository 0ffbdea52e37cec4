import pytest

from productboard_mcp.core.config import Settings, validate_settings


def make_settings(**overrides):
    return Settings(_env_file=None, **overrides)


def test_defaults():
    config = make_settings()
    assert config.productboard_base_url == "https://api.productboard.com"
    assert config.retry_attempts == 3
    assert config.rate_limit_max_requests == 60
    assert config.pagination_max_pages == 100
    assert config.caller_access_level == "read"


def test_dev_settings_validate():
    validate_settings(make_settings())


@pytest.mark.parametrize(
    "overrides,needle",
    [
        ({"app_env": "prod", "debug": True}, "DEBUG"),
        ({"app_env": "prod", "debug": False}, "API_TOKEN"),
        ({"app_env": "prod", "debug": False, "api_token": "t"}, "PRODUCTBOARD_API_TOKEN"),
        ({"productboard_auth_type": "oauth2"}, "PRODUCTBOARD_OAUTH_TOKEN_URL"),
        ({"retry_attempts": 0}, "RETRY_ATTEMPTS"),
        ({"rate_limit_max_requests": 0}, "RATE_LIMIT_MAX_REQUESTS"),
    ],
)
def test_invalid_settings(overrides, needle):
    with pytest.raises(RuntimeError) as exc_info:
        validate_settings(make_settings(**overrides))
    assert needle in str(exc_info.value)


def test_prod_with_everything_set():
    validate_settings(
        make_settings(app_env="prod", debug=False, api_token="t", productboard_api_token="pb")
    )
