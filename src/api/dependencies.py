"""FastAPI dependency injection: session, queue, providers.

Every handle is built once in the app lifespan and read from ``app.state``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import Settings
from src.parsers.bitquery.client import BitqueryClient
from src.parsers.moralis.client import MoralisClient
from src.parsers.rugcheck.client import RugcheckClient
from src.pipeline.dispatcher import TaskDispatcher
from src.pipeline.durable_queue import RedisListQueue
from src.pipeline.rotator import QueueRotator


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session (auto-closes)."""
    async with request.app.state.session_factory() as session:
        yield session


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rotator(request: Request) -> QueueRotator:
    return QueueRotator(RedisListQueue(request.app.state.redis))


def get_dispatcher(request: Request) -> TaskDispatcher:
    return TaskDispatcher(request.app.state.qstash)


def get_bitquery(request: Request) -> BitqueryClient:
    return request.app.state.bitquery


def get_rugcheck(request: Request) -> RugcheckClient:
    return request.app.state.rugcheck


def get_moralis(request: Request) -> MoralisClient:
    return request.app.state.moralis
