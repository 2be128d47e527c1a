"""Swap polling for monitored tokens."""

from datetime import UTC, datetime, timedelta
from typing import Protocol

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.parsers.moralis.models import MoralisSwap
from src.pipeline.persistence import get_active_monitors, save_swaps, touch_monitor_checked
from src.pipeline.results import ItemResult, StageSummary


class SwapSource(Protocol):
    async def get_swaps_by_token_address(
        self, address: str, *, from_date: datetime, to_date: datetime
    ) -> list[MoralisSwap]: ...


async def check_monitored(
    session: AsyncSession,
    provider: SwapSource,
    *,
    now: datetime | None = None,
    lookback: timedelta = timedelta(hours=1),
) -> StageSummary:
    """Store the last ``lookback`` of swaps for every monitored token."""
    now = now or datetime.now(UTC)
    monitors = await get_active_monitors(session)
    targets = [(m.id, m.token_address) for m in monitors]
    summary = StageSummary()

    for monitor_id, address in targets:
        try:
            swaps = await provider.get_swaps_by_token_address(
                address, from_date=now - lookback, to_date=now
            )
            count = await save_swaps(session, address=address, swaps=swaps)
            await touch_monitor_checked(session, monitor_id, now)
            await session.commit()
            summary.results.append(ItemResult(
                token_address=address, success=True, swaps_processed=count
            ))
        except Exception as e:
            await session.rollback()
            logger.error(f"[MONITOR] Error processing token {address}: {e}")
            summary.results.append(ItemResult(
                token_address=address,
                success=False,
                error="Failed to process swaps",
            ))

    logger.info(f"[MONITOR] Checked {summary.processed} tokens, {summary.failed} failed")
    return summary
