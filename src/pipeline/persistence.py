"""Pipeline persistence: create-if-absent candidates, score log, monitor upserts.

All functions flush only; the calling stage owns the commit.
Timestamps are stored as naive UTC.
"""

from datetime import UTC, datetime

from sqlalchemy import desc, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.monitor import TokenMonitor, TokenSwap
from src.models.token import CandidateToken, ScoredToken
from src.parsers.moralis.models import MoralisSwap


def _insert(session: AsyncSession, model: type):
    """Dialect-specific INSERT so ON CONFLICT works on PostgreSQL and SQLite."""
    if session.bind.dialect.name == "sqlite":
        return sqlite_insert(model)
    return pg_insert(model)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


async def insert_candidate_if_absent(
    session: AsyncSession, *, address: str, creation_time: datetime
) -> bool:
    """Create a candidate; a repeat sighting changes nothing.

    Returns True if a new row was inserted.
    """
    stmt = (
        _insert(session, CandidateToken)
        .values(
            token_address=address,
            creation_time=to_naive_utc(creation_time),
            is_processed=False,
        )
        .on_conflict_do_nothing(index_elements=["token_address"])
    )
    result = await session.execute(stmt)
    await session.flush()
    return bool(result.rowcount)


async def get_candidate(session: AsyncSession, address: str) -> CandidateToken | None:
    result = await session.execute(
        select(CandidateToken).where(CandidateToken.token_address == address)
    )
    return result.scalar_one_or_none()


async def get_due_candidates(
    session: AsyncSession, *, cutoff: datetime, limit: int | None = None
) -> list[CandidateToken]:
    """Unprocessed candidates created at or before ``cutoff``, oldest first."""
    query = (
        select(CandidateToken)
        .where(
            CandidateToken.creation_time <= to_naive_utc(cutoff),
            CandidateToken.is_processed.is_(False),
        )
        .order_by(CandidateToken.creation_time, CandidateToken.id)
    )
    if limit is not None:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def record_score(session: AsyncSession, *, address: str, score: int) -> ScoredToken:
    row = ScoredToken(token_address=address, score=score, checked_at=utcnow())
    session.add(row)
    await session.flush()
    return row


async def mark_processed(session: AsyncSession, address: str) -> None:
    await session.execute(
        update(CandidateToken)
        .where(CandidateToken.token_address == address)
        .values(is_processed=True)
    )
    await session.flush()


async def get_latest_score(session: AsyncSession, address: str) -> ScoredToken | None:
    """Most recent scoring event for an address (re-scores append rows)."""
    result = await session.execute(
        select(ScoredToken)
        .where(ScoredToken.token_address == address)
        .order_by(desc(ScoredToken.id))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def upsert_monitor(
    session: AsyncSession, *, address: str, is_monitoring: bool, now: datetime
) -> TokenMonitor:
    """Create or update the monitor flag, always stamping ``updated_at``."""
    now = to_naive_utc(now)
    stmt = (
        _insert(session, TokenMonitor)
        .values(
            token_address=address,
            is_monitoring=is_monitoring,
            created_at=now,
            updated_at=now,
        )
        .on_conflict_do_update(
            index_elements=["token_address"],
            set_={"is_monitoring": is_monitoring, "updated_at": now},
        )
        .returning(TokenMonitor)
    )
    result = await session.execute(
        select(TokenMonitor)
        .from_statement(stmt)
        .execution_options(populate_existing=True)
    )
    monitor = result.scalar_one()
    await session.flush()
    return monitor


async def get_active_monitors(session: AsyncSession) -> list[TokenMonitor]:
    result = await session.execute(
        select(TokenMonitor)
        .where(TokenMonitor.is_monitoring.is_(True))
        .order_by(TokenMonitor.id)
    )
    return list(result.scalars().all())


async def save_swaps(
    session: AsyncSession, *, address: str, swaps: list[MoralisSwap]
) -> int:
    """Bulk insert swaps, skipping transaction hashes already stored."""
    if not swaps:
        return 0

    rows = []
    for swap in swaps:
        base, quote = swap.base_leg, swap.quote_leg
        rows.append({
            "transaction_hash": swap.transactionHash,
            "token_address": address,
            "transaction_type": "BUY" if swap.is_buy else "SELL",
            "block_timestamp": to_naive_utc(swap.blockTimestamp),
            "block_number": swap.blockNumber,
            "wallet_address": swap.walletAddress,
            "pair_address": swap.pairAddress,
            "exchange_name": swap.exchangeName,
            "base_token": swap.baseToken,
            "quote_token": swap.quoteToken,
            "base_amount": base.amount,
            "base_amount_usd": base.usdAmount,
            "quote_amount": quote.amount,
            "quote_amount_usd": quote.usdAmount,
        })

    stmt = (
        _insert(session, TokenSwap)
        .values(rows)
        .on_conflict_do_nothing(index_elements=["transaction_hash"])
    )
    await session.execute(stmt)
    await session.flush()
    return len(rows)


async def touch_monitor_checked(
    session: AsyncSession, monitor_id: int, now: datetime
) -> None:
    await session.execute(
        update(TokenMonitor)
        .where(TokenMonitor.id == monitor_id)
        .values(last_checked_at=to_naive_utc(now))
    )
    await session.flush()
