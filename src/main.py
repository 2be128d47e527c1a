"""Entry point for the pump-radar pipeline API."""

import asyncio

from loguru import logger

from src.api.server import run_api_server
from src.utils.logger import setup_logger


async def main() -> None:
    setup_logger(level="INFO")
    logger.info("Starting pump-radar pipeline...")
    # uvicorn installs its own SIGINT/SIGTERM handlers and drains the lifespan
    await run_api_server()
    logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
