"""FastAPI application factory for the pipeline endpoints."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from config.settings import Settings, settings
from src.api.middleware import SecurityHeadersMiddleware
from src.db.database import create_engine, create_session_factory
from src.db.redis import close_redis, create_redis
from src.parsers.bitquery.client import BitqueryClient
from src.parsers.moralis.client import MoralisClient
from src.parsers.qstash.client import QStashClient
from src.parsers.rugcheck.client import RugcheckClient

# Rate limiter (shared instance)
limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open every connection once per process and close them on shutdown."""
    cfg: Settings = app.state.settings
    app.state.engine = create_engine(cfg.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.redis = create_redis(cfg.redis_url)
    app.state.qstash = QStashClient(cfg.qstash_token, cfg.qstash_url)
    app.state.bitquery = BitqueryClient(cfg.bitquery_access_token, cfg.bitquery_max_rps)
    app.state.rugcheck = RugcheckClient(cfg.rugcheck_max_rps)
    app.state.moralis = MoralisClient(cfg.moralis_api_key, cfg.moralis_max_rps)
    logger.info("Pipeline resources ready")

    try:
        yield
    finally:
        await app.state.qstash.close()
        await app.state.bitquery.close()
        await app.state.rugcheck.close()
        await app.state.moralis.close()
        await close_redis(app.state.redis)
        await app.state.engine.dispose()
        logger.info("Pipeline resources closed")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Pump Radar Pipeline API",
        version="0.1.0",
        docs_url="/api/docs" if os.getenv("DASHBOARD_DEBUG") else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if os.getenv("DASHBOARD_DEBUG") else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings or settings

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    from src.api.routers.health import router as health_router
    from src.api.routers.pipeline import router as pipeline_router
    from src.api.routers.schedule import router as schedule_router

    app.include_router(health_router)
    app.include_router(schedule_router)
    app.include_router(pipeline_router)

    return app
