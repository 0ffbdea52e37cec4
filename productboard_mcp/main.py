"""
FastAPI application.
"""
from contextlib import asynccontextmanager
from time import perf_counter
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from productboard_mcp import __version__
from productboard_mcp.api.client import APIClientConfig, ProductboardAPIClient
from productboard_mcp.auth.permissions import CallerPermissions
from productboard_mcp.core.config import Settings, settings as default_settings, validate_settings
from productboard_mcp.core.context import build_client_context
from productboard_mcp.core.logging import log_context, logger, new_request_id, setup_logging
from productboard_mcp.routers import system, tools
from productboard_mcp.services.tool_service import ToolService
from productboard_mcp.tools import ToolRegistry, register_default_tools


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the app. `transport` replaces the network for every outbound call."""
    config = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        validate_settings(config)
        logger.info("Starting Productboard tool server {}", __version__)

        context = build_client_context(config, transport=transport)
        client = ProductboardAPIClient(
            APIClientConfig.from_settings(config), context, transport=transport
        )
        registry = register_default_tools(ToolRegistry(), client)
        caller = CallerPermissions.from_settings(config.caller_access_level, config.caller_permissions)

        app.state.auth = context.auth
        app.state.client = client
        app.state.registry = registry
        app.state.tool_service = ToolService(registry, caller)

        if not context.auth.has_credential():
            logger.warning("No Productboard credential configured; API calls will be rejected")
        logger.info(
            "Registered {} tools; caller access level '{}'", len(registry), caller.access_level.label
        )

        yield

        logger.info("Shutting down Productboard tool server...")
        await client.aclose()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Productboard MCP",
        description="Permission-gated tools over the Productboard REST API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or new_request_id()
        request.state.request_id = request_id

        start = perf_counter()
        response = None
        with log_context(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Unhandled request error")
                raise
            finally:
                elapsed_ms = (perf_counter() - start) * 1000
                logger.info(
                    "request_complete path={} method={} status={} elapsed_ms={:.2f}",
                    request.url.path,
                    request.method,
                    getattr(response, "status_code", 500),
                    elapsed_ms,
                )

        if response is not None:
            response.headers["X-Request-Id"] = request_id
            return response

        return JSONResponse(
            status_code=500, content={"detail": "internal error"}, headers={"X-Request-Id": request_id}
        )

    app.include_router(tools.router, prefix="/api/v1", tags=["tools"])
    app.include_router(system.router, tags=["system"])

    @app.get("/api")
    async def root():
        return {"name": "Productboard MCP", "version": __version__}

    return app


setup_logging(
    level=default_settings.log_level,
    fmt=default_settings.log_format,
    debug=default_settings.debug,
    log_dir=default_settings.log_dir,
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "productboard_mcp.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=default_settings.debug,
    )
