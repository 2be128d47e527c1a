"""Tests for the Moralis swaps client and swap model."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import httpx
import pytest

from src.parsers.moralis.client import MoralisClient
from src.parsers.moralis.exceptions import MoralisApiError
from src.parsers.moralis.models import MoralisSwap

NOW = datetime(2026, 3, 1, 15, 0, 0, tzinfo=UTC)


def _raw(tx: str, kind: str = "buy") -> dict:
    return {
        "transactionHash": tx,
        "transactionType": kind,
        "blockTimestamp": "2026-03-01T14:59:00.000Z",
        "bought": {"address": "Mint111", "amount": "500", "usdAmount": 3.2},
        "sold": {"address": "So111", "amount": "0.02", "usdAmount": 3.1},
    }


def test_sell_swaps_base_and_quote_legs():
    swap = MoralisSwap(**_raw("tx1", "SELL"))
    assert swap.is_buy is False
    assert swap.base_leg.amount == Decimal("0.02")
    assert swap.quote_leg.amount == Decimal("500")


@pytest.mark.asyncio
async def test_follows_cursor_until_exhausted():
    client = MoralisClient("key", max_rps=0)
    client._client = AsyncMock(spec=httpx.AsyncClient)
    client._client.get = AsyncMock(side_effect=[
        httpx.Response(200, json={"result": [_raw("tx1"), _raw("tx2")], "cursor": "c1"}),
        httpx.Response(200, json={"result": [_raw("tx3"), {"broken": True}], "cursor": None}),
    ])

    swaps = await client.get_swaps_by_token_address(
        "Mint111", from_date=NOW - timedelta(hours=1), to_date=NOW
    )

    assert [s.transactionHash for s in swaps] == ["tx1", "tx2", "tx3"]
    first_params = client._client.get.await_args_list[0].kwargs["params"]
    assert first_params["fromDate"] == str(int((NOW - timedelta(hours=1)).timestamp()))
    assert first_params["order"] == "DESC"
    assert client._client.get.await_args_list[1].kwargs["params"]["cursor"] == "c1"


@pytest.mark.asyncio
async def test_http_error_raises():
    client = MoralisClient("key", max_rps=0)
    client._client = AsyncMock(spec=httpx.AsyncClient)
    client._client.get = AsyncMock(return_value=httpx.Response(401, text="bad key"))
    with pytest.raises(MoralisApiError):
        await client.get_swaps_by_token_address("Mint111", from_date=NOW, to_date=NOW)
