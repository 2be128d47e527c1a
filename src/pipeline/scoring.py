"""Risk scoring: promote aged candidates through Rugcheck.

A candidate becomes due one hour after creation: fresh pools have too
little history for Rugcheck to produce a stable score.
"""

from datetime import UTC, datetime, timedelta
from typing import Protocol

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.parsers.rugcheck.models import RugcheckReport
from src.pipeline.persistence import get_due_candidates, mark_processed, record_score
from src.pipeline.results import ItemResult, StageSummary

MIN_AGE = timedelta(hours=1)


class RiskReportSource(Protocol):
    async def get_token_report(self, mint: str) -> RugcheckReport | None: ...


async def score_due(
    session: AsyncSession,
    provider: RiskReportSource,
    *,
    now: datetime | None = None,
    min_age: timedelta = MIN_AGE,
    batch_size: int | None = None,
) -> StageSummary:
    """Score every due candidate, oldest first, one at a time.

    The score row and the processed flag commit together per candidate;
    a failure rolls both back so the candidate is retried next tick.
    ``batch_size`` caps the work per call; leftovers stay due.
    """
    now = now or datetime.now(UTC)
    candidates = await get_due_candidates(session, cutoff=now - min_age, limit=batch_size)
    # Rollback expires loaded rows, so keep plain strings
    addresses = [c.token_address for c in candidates]
    summary = StageSummary()

    for address in addresses:
        try:
            report = await provider.get_token_report(address)
            if report is None:
                raise LookupError("no report available")
            score = report.rounded_score
            await record_score(session, address=address, score=score)
            await mark_processed(session, address)
            await session.commit()
            logger.info(f"[SCORING] {address} scored {score}")
            summary.results.append(ItemResult(token_address=address, success=True, score=score))
        except Exception as e:
            await session.rollback()
            logger.error(f"[SCORING] Error checking token {address}: {e}")
            summary.results.append(ItemResult(
                token_address=address,
                success=False,
                error="Failed to check token",
            ))

    logger.info(f"[SCORING] {summary.processed} processed, {summary.failed} failed")
    return summary
