"""Cron-triggered backlog rotation: one tick per call, dispatched via QStash."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from loguru import logger

from config.settings import Settings
from src.api.dependencies import get_dispatcher, get_rotator, get_settings
from src.pipeline.dispatcher import TaskDispatcher
from src.pipeline.exceptions import QueueEmpty
from src.pipeline.rotator import QueueRotator

router = APIRouter(prefix="/api/v1/schedule", tags=["schedule"])


def _server_error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": message},
    )


@router.get("/fetch", response_model=None)
async def schedule_fetch(
    rotator: QueueRotator = Depends(get_rotator),
    dispatcher: TaskDispatcher = Depends(get_dispatcher),
    cfg: Settings = Depends(get_settings),
) -> Any:
    """Rotate one user id off the outreach backlog and dispatch a fetch job."""
    try:
        items = await rotator.rotate(cfg.outreach_queue_key, cfg.outreach_batch_size)
    except QueueEmpty:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        logger.error(f"[ROTATE] {cfg.outreach_queue_key} unavailable: {e}")
        return _server_error("Failed to rotate queue")

    try:
        await dispatcher.dispatch(items, cfg.outreach_url, payload_key="userId")
    except Exception as e:
        logger.error(f"[DISPATCH] Fetch job for {items[0]} not submitted: {e}")
        return _server_error("Failed to dispatch jobs")
    return {"enqueued": items[0]}


@router.get("/refresh-token", response_model=None)
async def schedule_refresh_token(
    rotator: QueueRotator = Depends(get_rotator),
    dispatcher: TaskDispatcher = Depends(get_dispatcher),
    cfg: Settings = Depends(get_settings),
) -> Any:
    """Rotate a batch of token addresses and dispatch staggered refresh jobs."""
    try:
        items = await rotator.rotate(cfg.refresh_queue_key, cfg.refresh_batch_size)
    except QueueEmpty:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        logger.error(f"[ROTATE] {cfg.refresh_queue_key} unavailable: {e}")
        return _server_error("Failed to rotate queue")

    try:
        await dispatcher.dispatch(
            items,
            cfg.refresh_endpoint,
            cfg.refresh_dispatch_rps,
            payload_key="address",
        )
    except Exception as e:
        logger.error(f"[DISPATCH] Refresh batch of {len(items)} not submitted: {e}")
        return _server_error("Failed to dispatch jobs")
    return {"enqueued": items}
