"""Health check — no auth required."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy import text

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    db_ok: bool
    redis_ok: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Check DB and Redis connectivity."""
    state = request.app.state

    db_ok = False
    try:
        async with state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        pass

    redis_ok = False
    try:
        redis_ok = bool(await state.redis.ping())
    except Exception:
        pass

    return HealthResponse(
        status="ok" if db_ok and redis_ok else "degraded",
        version=request.app.version,
        db_ok=db_ok,
        redis_ok=redis_ok,
    )
