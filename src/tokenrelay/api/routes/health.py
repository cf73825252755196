"""Health check endpoints."""

from fastapi import APIRouter, Request

from tokenrelay import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "tokenrelay"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration and RPC status."""
    settings = request.app.state.settings
    probe = await request.app.state.services.health_probe.check()
    return {
        "status": "healthy" if probe.connected else "degraded",
        "service": "tokenrelay",
        "version": __version__,
        "rpc": {
            "connected": probe.connected,
            "block_number": probe.block_number,
            "error": probe.error,
        },
        "config": settings.get_safe_dict(),
    }
