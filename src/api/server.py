"""API server: runs uvicorn inside the current asyncio event loop."""

from __future__ import annotations

import uvicorn
from loguru import logger

from config.settings import settings


async def run_api_server() -> None:
    """Serve the pipeline API until uvicorn receives a shutdown signal."""
    from src.api.app import create_app

    app = create_app(settings)
    config = uvicorn.Config(
        app=app,
        host="0.0.0.0",
        port=settings.dashboard_port,
        log_level="warning",
        loop="none",  # use the existing event loop
    )
    server = uvicorn.Server(config)
    logger.info(f"Pipeline API starting on http://0.0.0.0:{settings.dashboard_port}")
    await server.serve()
