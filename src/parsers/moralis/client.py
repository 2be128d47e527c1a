"""Moralis Solana gateway client — recent swaps for a token."""

import asyncio
from datetime import datetime

import httpx
from loguru import logger
from pydantic import ValidationError

from src.parsers.moralis.exceptions import MoralisApiError
from src.parsers.moralis.models import MoralisSwap
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://solana-gateway.moralis.io"
PAGE_LIMIT = 100
MAX_PAGES = 20
MAX_RETRIES = 2
RETRY_DELAYS = [1.0, 3.0]


class MoralisClient:
    """Async HTTP client for the Moralis Solana gateway (X-API-Key)."""

    def __init__(self, api_key: str, max_rps: float = 5.0) -> None:
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            timeout=15.0,
            headers={"accept": "application/json", "X-API-Key": api_key},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def get_swaps_by_token_address(
        self, address: str, *, from_date: datetime, to_date: datetime
    ) -> list[MoralisSwap]:
        """All swaps in [from_date, to_date], newest first, following the cursor."""
        url = f"{BASE_URL}/token/mainnet/{address}/swaps"
        params: dict = {
            "fromDate": str(int(from_date.timestamp())),
            "toDate": str(int(to_date.timestamp())),
            "limit": PAGE_LIMIT,
            "order": "DESC",
        }

        swaps: list[MoralisSwap] = []
        for _ in range(MAX_PAGES):
            data = await self._get(url, dict(params))
            for item in data.get("result") or []:
                try:
                    swaps.append(MoralisSwap(**item))
                except ValidationError as e:
                    logger.debug(f"[MORALIS] Skipping malformed swap: {e.error_count()} errors")
            cursor = data.get("cursor")
            if not cursor:
                break
            params["cursor"] = cursor
        else:
            logger.warning(f"[MORALIS] Page cap hit for {address[:12]}")

        return swaps

    async def _get(self, url: str, params: dict) -> dict:
        for attempt in range(MAX_RETRIES + 1):
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.get(url, params=params)

                if resp.status_code == 429 and attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[MORALIS] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue
                if resp.status_code != 200:
                    raise MoralisApiError(f"HTTP {resp.status_code}: {resp.text[:200]}")
                return resp.json()

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[MORALIS] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                else:
                    raise MoralisApiError(f"Failed after {MAX_RETRIES + 1} attempts: {e}") from e

        raise MoralisApiError("Rate limited on every attempt")
