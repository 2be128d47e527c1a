"""Token pipeline endpoints: intake, scoring, monitoring toggle, swap check."""

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import Settings
from src.api.app import limiter
from src.api.dependencies import (
    get_bitquery,
    get_moralis,
    get_rugcheck,
    get_session,
    get_settings,
)
from src.parsers.bitquery.client import BitqueryClient
from src.parsers.moralis.client import MoralisClient
from src.parsers.rugcheck.client import RugcheckClient
from src.pipeline.exceptions import MissingTokenAddressError
from src.pipeline.intake import intake
from src.pipeline.monitor_check import check_monitored
from src.pipeline.monitoring import set_monitoring
from src.pipeline.persistence import get_latest_score
from src.pipeline.scoring import score_due

router = APIRouter(prefix="/api/v1/pipeline", tags=["pipeline"])


class ToggleRequest(BaseModel):
    tokenAddress: str | None = None
    isMonitoring: bool


def _failure(message: str, code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    return JSONResponse(status_code=code, content={"success": False, "error": message})


@router.get("/pump-tokens", response_model=None)
async def pump_tokens(
    session: AsyncSession = Depends(get_session),
    bitquery: BitqueryClient = Depends(get_bitquery),
    cfg: Settings = Depends(get_settings),
) -> Any:
    """Register recently graduated tokens as scoring candidates."""
    try:
        summary = await intake(session, bitquery, limit=cfg.intake_limit)
    except Exception as e:
        logger.error(f"[INTAKE] Error fetching pump tokens: {e}")
        return _failure("Failed to fetch pump tokens")
    return summary.to_dict()


@router.get("/check-tokens", response_model=None)
async def check_tokens(
    session: AsyncSession = Depends(get_session),
    rugcheck: RugcheckClient = Depends(get_rugcheck),
    cfg: Settings = Depends(get_settings),
) -> Any:
    """Score candidates that have aged past the minimum age."""
    try:
        summary = await score_due(
            session,
            rugcheck,
            min_age=timedelta(seconds=cfg.scoring_min_age_sec),
            batch_size=cfg.scoring_batch_size,
        )
    except Exception as e:
        logger.error(f"[SCORING] Error checking tokens: {e}")
        return _failure("Failed to check tokens")
    return summary.to_dict()


@router.post("/toggle", response_model=None)
@limiter.limit("60/minute")
async def toggle(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> Any:
    """Turn monitoring on or off for a token address.

    Both fields are read from the JSON body. A body that is not JSON, or
    lacks ``isMonitoring``, is a 400 and leaves any existing record alone.
    """
    try:
        body = ToggleRequest.model_validate(await request.json())
    except ValueError as e:
        logger.debug(f"[MONITOR] Rejected toggle body: {e}")
        return _failure("Invalid request body", status.HTTP_400_BAD_REQUEST)

    try:
        monitor = await set_monitoring(session, body.tokenAddress, body.isMonitoring)
    except MissingTokenAddressError as e:
        return _failure(str(e), status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        logger.error(f"[MONITOR] Error toggling monitor: {e}")
        return _failure("Failed to toggle monitoring")
    return {"success": True, "monitor": monitor.to_dict()}


@router.get("/check", response_model=None)
async def check(
    session: AsyncSession = Depends(get_session),
    moralis: MoralisClient = Depends(get_moralis),
    cfg: Settings = Depends(get_settings),
) -> Any:
    """Pull last-hour swaps for every monitored token."""
    try:
        summary = await check_monitored(
            session, moralis, lookback=timedelta(seconds=cfg.monitor_lookback_sec)
        )
    except Exception as e:
        logger.error(f"[MONITOR] Error in monitor check: {e}")
        return _failure("Failed to check monitors")
    return summary.to_dict()


@router.get("/scores/{address}")
async def latest_score(
    address: str,
    session: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Latest risk score for a token (most recent scoring event wins)."""
    row = await get_latest_score(session, address)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Token not scored")
    return {
        "tokenAddress": row.token_address,
        "score": row.score,
        "checkedAt": row.checked_at.isoformat() if row.checked_at else None,
    }
