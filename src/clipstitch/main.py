"""FastAPI application entry point."""

from __future__ import annotations

import logging
import sys

import httpx
import uvicorn
from fastapi import FastAPI

from . import __version__
from .config import AppConfig, load_config
from .dependencies import build_render_service, include_routers
from .logging import configure_logging
from .probes.duration_probe import DurationProbe
from .renderer.renderer_base import CompositionRenderer

logger = logging.getLogger(__name__)


def create_app(
    config: AppConfig | None = None,
    *,
    renderer: CompositionRenderer | None = None,
    probe: DurationProbe | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build FastAPI instance with configured dependencies."""
    configure_logging()
    cfg = config or load_config()
    app = FastAPI(title="clipstitch", version=__version__)
    service = build_render_service(cfg, renderer=renderer, probe=probe, transport=transport)
    include_routers(app, cfg, service)
    return app


def serve() -> int:
    """Console entry point: refuse to start without a bearer token."""
    configure_logging()
    config = load_config()
    if not config.api_bearer_token:
        logger.critical("FATAL: API_BEARER_TOKEN environment variable is not set.")
        return 1
    app = create_app(config)
    logger.info("server.starting", extra={"host": config.host, "port": config.port})
    uvicorn.run(app, host=config.host, port=config.port)
    return 0


if __name__ == "__main__":
    sys.exit(serve())
