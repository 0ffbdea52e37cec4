"""
System routes: health check.
"""
from fastapi import APIRouter, Request

from productboard_mcp import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Liveness plus a summary of what is wired up. Does not call Productboard."""
    registry = getattr(request.app.state, "registry", None)
    auth = getattr(request.app.state, "auth", None)
    return {
        "status": "ok",
        "version": __version__,
        "tools": len(registry) if registry is not None else 0,
        "credential_configured": bool(auth and auth.has_credential()),
    }
