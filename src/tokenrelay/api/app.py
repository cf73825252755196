"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tokenrelay import __version__
from tokenrelay.config import Settings, get_settings
from tokenrelay.rpc.base import ChainRPC
from tokenrelay.web.services import build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup: informational probe only, the relay starts either way
    services = app.state.services
    probe = await services.health_probe.check()
    if probe.connected:
        logger.info("RPC node reachable (chain %s, block %s)", probe.chain_id, probe.block_number)
    else:
        logger.warning("RPC node not reachable at startup: %s", probe.error)
    yield
    # Shutdown
    await services.rpc.close()


def create_app(settings: Optional[Settings] = None, rpc: Optional[ChainRPC] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the cached environment settings
        rpc: Chain client to use instead of a JSON-RPC client
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Token Relay API",
        description="Verifies wallet-signed ERC20 transfers and relays them to the chain",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.services = build_services(settings, rpc=rpc)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from tokenrelay.api.routes import health
    from tokenrelay.web.controllers import relay_router, tokens_router, transactions_router

    app.include_router(health.router, tags=["Health"])
    app.include_router(relay_router)
    app.include_router(transactions_router)
    app.include_router(tokens_router)

    return app


# Default app instance
app = create_app()
