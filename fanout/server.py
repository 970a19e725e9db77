import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fanout import __version__
from fanout.config import ForwarderConfig, load_config
from fanout.forwarder.route import CORS_METHODS, register_forward_route
from fanout.forwarder.service import FanoutForwarder
from fanout.telemetry import configure_metrics, configure_tracing

logger = logging.getLogger("uvicorn.error")


def create_app(
    config: Optional[ForwarderConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the forwarder application. The outbound client lives for the
    lifetime of the app; tests may inject an httpx transport.
    """
    config = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = httpx.AsyncClient(
            timeout=None,
            follow_redirects=False,
            transport=transport,
        )
        app.state.forwarder = FanoutForwarder(config, client)
        logger.info(f"Serving on http://localhost:{config.port}")
        logger.info(
            f"Response mode. AwaitForward={config.policy.awaits_forward} "
            f"ReturnsSuccessFirst={config.policy.prioritize_success}"
        )
        try:
            yield
        finally:
            await client.aclose()

    # Every path belongs to the catch-all route, so no docs endpoints
    app = FastAPI(
        title=config.service_name,
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config

    if config.cors_origin:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[config.cors_origin],
            allow_methods=CORS_METHODS,
            allow_headers=["*"],
        )
        logger.debug(f"CORS Enabled. Origin={config.cors_origin}")

    configure_metrics(app, config)
    configure_tracing(app, config)

    register_forward_route(app)
    return app
