"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from strangle import __version__
from strangle.config import EngineConfig
from strangle.search import SearchDriver
from strangle.server.routes import router

logger = logging.getLogger(__name__)


def create_app(config: EngineConfig | None = None) -> FastAPI:
    """Build the application; one read-only driver serves every game."""
    cfg = config or EngineConfig()

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        app.state.driver = SearchDriver(cfg)
        logger.info(
            "Search driver ready (%s opponents, %d ms margin).",
            cfg.opponent_model, cfg.safety_margin_ms,
        )
        yield

    app = FastAPI(title="Strangle", version=__version__, lifespan=_lifespan)
    app.state.config = cfg
    app.include_router(router)
    return app
