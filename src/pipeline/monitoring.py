"""Operator monitoring toggle."""

from datetime import UTC, datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.monitor import TokenMonitor
from src.pipeline.exceptions import MissingTokenAddressError
from src.pipeline.persistence import upsert_monitor


async def set_monitoring(
    session: AsyncSession,
    address: str | None,
    is_monitoring: bool,
    *,
    now: datetime | None = None,
) -> TokenMonitor:
    """Set the flag, creating the record on first toggle. Any sequence is valid."""
    address = (address or "").strip()
    if not address:
        raise MissingTokenAddressError("Token address is required")

    monitor = await upsert_monitor(
        session,
        address=address,
        is_monitoring=is_monitoring,
        now=now or datetime.now(UTC),
    )
    await session.commit()
    logger.info(f"[MONITOR] {address} monitoring={'on' if is_monitoring else 'off'}")
    return monitor
