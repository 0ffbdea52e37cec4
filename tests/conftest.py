"""
Pytest Fixtures
"""
import asyncio
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from productboard_mcp.api.client import APIClientConfig, ProductboardAPIClient
from productboard_mcp.auth.provider import BearerTokenAuth
from productboard_mcp.core.config import Settings
from productboard_mcp.core.context import ClientContext
from productboard_mcp.main import create_app
from productboard_mcp.middleware.rate_limiter import RateLimiter
from productboard_mcp.utils.retry import RetryHandler

BASE_URL = "https://api.test.local"
PB_TOKEN = "pb-test-token"
API_TOKEN = "test-api-token"


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SleepRecorder:
    """Async sleep stand-in: records delays, optionally moves a fake clock."""

    def __init__(self, clock: Optional[FakeClock] = None):
        self.calls: List[float] = []
        self.clock = clock

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)
        await asyncio.sleep(0)


class FakeProductboard:
    """
    In-memory Productboard for httpx.MockTransport.

    Routes map (METHOD, path) to a list of responses served in order; the last
    one repeats. A response is an httpx.Response, an exception to raise, a
    callable taking the request, or any JSON value (served with status 200).
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> "FakeProductboard":
        self.routes[(method.upper(), path)] = list(responses)
        return self

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})

        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, httpx.Response):
            return item
        if callable(item):
            return item(request)
        return httpx.Response(200, json=item)


def build_client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    token: Optional[str] = PB_TOKEN,
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    page_limit: int = 100,
    max_pages: int = 100,
    rate_limiter: Optional[RateLimiter] = None,
    sleep: Optional[SleepRecorder] = None,
) -> ProductboardAPIClient:
    config = APIClientConfig(
        base_url=BASE_URL,
        retry_attempts=max_attempts,
        retry_delay=initial_delay,
        max_retry_delay=max_delay,
        page_limit=page_limit,
        max_pages=max_pages,
    )
    context = ClientContext(
        auth=BearerTokenAuth(token),
        rate_limiter=rate_limiter or RateLimiter(max_requests=1000, time_window=60.0),
    )
    return ProductboardAPIClient(
        config,
        context,
        transport=httpx.MockTransport(handler),
        retry_handler=RetryHandler(config.retry_policy(), sleep=sleep or SleepRecorder()),
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fake_api() -> FakeProductboard:
    return FakeProductboard()


@pytest.fixture
async def api_client(fake_api, sleep_recorder) -> AsyncGenerator[ProductboardAPIClient, None]:
    client = build_client(fake_api, sleep=sleep_recorder)
    yield client
    await client.aclose()


@pytest.fixture
def app_settings() -> Settings:
    return Settings(
        _env_file=None,
        app_env="dev",
        api_token=API_TOKEN,
        productboard_base_url=BASE_URL,
        productboard_api_token=PB_TOKEN,
        productboard_auth_type="bearer",
        retry_attempts=1,
        caller_access_level="write",
        caller_permissions="",
    )


@pytest.fixture
async def client(app_settings, fake_api) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated AsyncClient against the app, with Productboard faked."""
    app = create_app(app_settings, transport=httpx.MockTransport(fake_api))
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        headers = {"X-API-Token": API_TOKEN}
        async with AsyncClient(transport=transport, base_url="http://test", headers=headers) as c:
            yield c


@pytest.fixture
def clocked_sleep(fake_clock) -> SleepRecorder:
    """Sleep that advances `fake_clock` by the requested delay."""
    return SleepRecorder(fake_clock)


@pytest.fixture
def make_client():
    """Factory for API clients over a MockTransport handler."""
    return build_client
