"""Token intake: register newly graduated pump.fun tokens as scoring candidates."""

from datetime import datetime
from typing import Protocol

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.parsers.bitquery.models import GraduatedToken
from src.pipeline.persistence import insert_candidate_if_absent
from src.pipeline.results import ItemResult, StageSummary


class GraduationSource(Protocol):
    async def get_recently_graduated_tokens(self, limit: int = 10) -> list[GraduatedToken]: ...


async def intake(
    session: AsyncSession, provider: GraduationSource, *, limit: int = 20
) -> StageSummary:
    """Fetch up to ``limit`` graduations and create-if-absent each candidate.

    Entries the provider marks unsuccessful (or without a mint) are skipped
    without a result entry. A failed insert is recorded and the batch goes on.
    Provider errors propagate: nothing can be processed without the list.
    """
    tokens = await provider.get_recently_graduated_tokens(limit)
    summary = StageSummary()

    for token in tokens:
        if not (token.success and token.pump_token):
            continue
        try:
            created = await insert_candidate_if_absent(
                session,
                address=token.pump_token,
                creation_time=datetime.fromisoformat(token.creation_time),
            )
            await session.commit()
            if created:
                logger.info(f"[INTAKE] New candidate {token.pump_token}")
            summary.results.append(ItemResult(token_address=token.pump_token, success=True))
        except Exception as e:
            await session.rollback()
            logger.error(f"[INTAKE] Failed to store {token.pump_token}: {e}")
            summary.results.append(ItemResult(
                token_address=token.pump_token,
                success=False,
                error="Failed to process token",
            ))

    logger.info(
        f"[INTAKE] {summary.processed} processed, {summary.failed} failed "
        f"(provider returned {len(tokens)})"
    )
    return summary
