"""
Productboard API client.

Every request goes through `dispatch`: auth headers are attached, one slot of
the shared rate budget is taken, the call is made, and failures are classified
and retried. Verb helpers, `make_request`, pagination and batches all funnel
into it; nothing else talks to the service directly.
"""
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx

from productboard_mcp.core.config import Settings
from productboard_mcp.core.context import ClientContext
from productboard_mcp.core.logging import logger, redact_headers
from productboard_mcp.middleware.rate_limiter import GLOBAL_KEY
from productboard_mcp.utils.retry import RetryHandler, RetryPolicy

from .batch import BatchExecutor
from .classifier import classify_failure
from .errors import APIAuthenticationError
from .pagination import PaginationAggregator
from .types import DELETE_SUCCESS, BatchOperation, BatchResult, RequestDescriptor


@dataclass
class APIClientConfig:
    base_url: str = "https://api.productboard.com"
    api_version: Optional[str] = "1"
    timeout: float = 10.0
    retry_attempts: int = 3
    retry_delay: float = 1.0
    max_retry_delay: float = 30.0
    page_limit: int = 100
    max_pages: int = 100

    @classmethod
    def from_settings(cls, config: Settings) -> "APIClientConfig":
        return cls(
            base_url=config.productboard_base_url,
            api_version=config.productboard_api_version,
            timeout=config.request_timeout_seconds,
            retry_attempts=config.retry_attempts,
            retry_delay=config.retry_initial_delay_seconds,
            max_retry_delay=config.retry_max_delay_seconds,
            page_limit=config.pagination_page_limit,
            max_pages=config.pagination_max_pages,
        )

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_attempts,
            initial_delay=self.retry_delay,
            max_delay=max(self.max_retry_delay, self.retry_delay),
        )


def _decode_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ProductboardAPIClient:
    """Async client for the Productboard REST API."""

    def __init__(
        self,
        config: APIClientConfig,
        context: ClientContext,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_handler: Optional[RetryHandler] = None,
    ):
        self.config = config
        self.context = context
        self.retry_handler = retry_handler or RetryHandler(config.retry_policy())
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ProductboardAPIClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self.config.api_version:
                headers["X-Version"] = str(self.config.api_version)
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url.rstrip("/"),
                headers=headers,
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def auth_headers(self) -> Dict[str, str]:
        """Headers the auth provider would attach right now."""
        return await self.context.auth.get_auth_headers()

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, descriptor: RequestDescriptor) -> Any:
        return await self.retry_handler.with_retries(lambda: self._send(descriptor))

    async def _send(self, descriptor: RequestDescriptor) -> Any:
        """One attempt: auth, rate slot, call, classify."""
        auth_headers = await self.context.auth.get_auth_headers()
        # header names are case-insensitive; caller values win
        headers = httpx.Headers(auth_headers)
        headers.update(descriptor.headers)
        anonymous = "authorization" not in headers

        await self.context.rate_limiter.acquire_slot(GLOBAL_KEY)

        client = self._get_client()
        logger.debug(
            "API Request method={} path={} params={} headers={}",
            descriptor.method,
            descriptor.path,
            descriptor.query,
            redact_headers({**client.headers, **headers}),
        )

        request_kwargs: Dict[str, Any] = {"params": descriptor.query, "headers": headers}
        if descriptor.body is not None:
            request_kwargs["json"] = descriptor.body

        start = perf_counter()
        try:
            response = await client.request(descriptor.method, descriptor.path, **request_kwargs)
        except httpx.TimeoutException as e:
            logger.error(
                "API Request Failed method={} path={} error=timeout",
                descriptor.method,
                descriptor.path,
            )
            raise classify_failure(
                status_code=None,
                fallback_message=f"Request to {descriptor.path} timed out after {self.config.timeout}s",
            ) from e
        except httpx.RequestError as e:
            logger.error(
                "API Request Failed method={} path={} error={}",
                descriptor.method,
                descriptor.path,
                type(e).__name__,
            )
            raise classify_failure(
                status_code=None,
                fallback_message=f"Request to {descriptor.path} failed: {str(e) or type(e).__name__}",
            ) from e

        elapsed_ms = (perf_counter() - start) * 1000
        body = _decode_body(response)

        if not response.is_success:
            logger.error(
                "API Error Response status={} method={} path={} params={} body={}",
                response.status_code,
                descriptor.method,
                descriptor.path,
                descriptor.query,
                body,
            )
            error = classify_failure(
                status_code=response.status_code,
                body=body,
                headers=response.headers,
                fallback_message=f"Request failed with status code {response.status_code}",
            )
            if anonymous and isinstance(error, APIAuthenticationError):
                error.message = f"{error.message} (no Productboard API credential is configured)"
            raise error

        logger.debug(
            "API Response status={} path={} elapsed_ms={:.2f}",
            response.status_code,
            descriptor.path,
            elapsed_ms,
        )
        return body

    # ------------------------------------------------------------------
    # verbs
    # ------------------------------------------------------------------

    async def get(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return await self.dispatch(RequestDescriptor("GET", path, params=params or {}, headers=headers or {}))

    async def post(
        self,
        path: str,
        body: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return await self.dispatch(
            RequestDescriptor("POST", path, params=params or {}, body=body, headers=headers or {})
        )

    async def put(
        self,
        path: str,
        body: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return await self.dispatch(
            RequestDescriptor("PUT", path, params=params or {}, body=body, headers=headers or {})
        )

    async def patch(
        self,
        path: str,
        body: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        return await self.dispatch(
            RequestDescriptor("PATCH", path, params=params or {}, body=body, headers=headers or {})
        )

    async def delete(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        await self.dispatch(RequestDescriptor("DELETE", path, params=params or {}, headers=headers or {}))

    async def make_request(
        self,
        method: Union[str, RequestDescriptor],
        path: Optional[str] = None,
        body: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Generic entry point for every verb.

        Accepts either a prepared `RequestDescriptor` or its parts. DELETE
        yields `{"success": True}` since the service returns no body.
        """
        if isinstance(method, RequestDescriptor):
            descriptor = method
        else:
            if path is None:
                raise ValueError("make_request needs a path")
            descriptor = RequestDescriptor(
                method, path, params=params or {}, body=body, headers=headers or {}
            )

        result = await self.dispatch(descriptor)
        if descriptor.method == "DELETE":
            return dict(DELETE_SUCCESS)
        return result

    # ------------------------------------------------------------------
    # aggregation
    # ------------------------------------------------------------------

    async def collect_all(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        max_pages: Optional[int] = None,
    ) -> List[Any]:
        aggregator = PaginationAggregator(
            self,
            page_limit=self.config.page_limit,
            max_pages=max_pages or self.config.max_pages,
        )
        return await aggregator.collect_all(path, params)

    async def run_batch(self, operations: Sequence[BatchOperation]) -> List[BatchResult]:
        return await BatchExecutor(self).run(operations)

    async def test_connection(self) -> bool:
        try:
            await self.get("/features", params={"pageLimit": 1})
            return True
        except APIAuthenticationError:
            return False
