"""Tests for the monitoring toggle."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select

from src.models.monitor import TokenMonitor
from src.pipeline.exceptions import MissingTokenAddressError
from src.pipeline.monitoring import set_monitoring

T0 = datetime(2026, 2, 1, 9, 0, 0, tzinfo=UTC)


async def _count(session) -> int:
    return (await session.execute(select(func.count(TokenMonitor.id)))).scalar_one()


@pytest.mark.asyncio
async def test_first_toggle_creates_record(db_session):
    monitor = await set_monitoring(db_session, "Mint111", True, now=T0)

    assert monitor.token_address == "Mint111"
    assert monitor.is_monitoring is True
    assert monitor.updated_at == T0.replace(tzinfo=None)
    assert await _count(db_session) == 1


@pytest.mark.asyncio
async def test_toggle_twice_is_idempotent_and_refreshes_updated_at(db_session):
    first = await set_monitoring(db_session, "Mint111", True, now=T0)
    first_updated = first.updated_at
    second = await set_monitoring(db_session, "Mint111", True, now=T0 + timedelta(seconds=5))

    assert await _count(db_session) == 1
    assert second.is_monitoring is True
    assert second.updated_at > first_updated


@pytest.mark.asyncio
async def test_toggle_off_mutates_in_place(db_session):
    on = await set_monitoring(db_session, "Mint111", True, now=T0)
    created_id = on.id
    off = await set_monitoring(db_session, "Mint111", False, now=T0 + timedelta(minutes=1))

    assert off.id == created_id
    assert off.is_monitoring is False
    assert off.created_at == T0.replace(tzinfo=None)


@pytest.mark.asyncio
@pytest.mark.parametrize("address", [None, "", "   "])
async def test_missing_address_rejected(db_session, address):
    with pytest.raises(MissingTokenAddressError):
        await set_monitoring(db_session, address, True)
    assert await _count(db_session) == 0


def test_to_dict_uses_api_field_names():
    monitor = TokenMonitor(
        id=1,
        token_address="Mint111",
        is_monitoring=True,
        created_at=datetime(2026, 1, 1),
        updated_at=datetime(2026, 1, 2),
    )
    d = monitor.to_dict()
    assert d["tokenAddress"] == "Mint111"
    assert d["isMonitoring"] is True
    assert d["updatedAt"] == "2026-01-02T00:00:00"
    assert d["lastCheckedAt"] is None
