"""Rugcheck.xyz summary reports, the risk signal behind candidate scoring."""

import asyncio

import httpx
from loguru import logger

from src.parsers.rate_limiter import RateLimiter
from src.parsers.rugcheck.models import RugcheckReport, RugcheckRisk

BASE_URL = "https://api.rugcheck.xyz/v1"
MAX_RETRIES = 2
BACKOFF_SECONDS = (2.0, 5.0)

_TRANSIENT = (httpx.TimeoutException, httpx.ConnectError)


def _backoff(attempt: int) -> float:
    return BACKOFF_SECONDS[min(attempt, len(BACKOFF_SECONDS) - 1)]


class RugcheckClient:
    """Reads the public summary endpoint; no key or wallet login needed."""

    def __init__(self, max_rps: float = 2.0) -> None:
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=15.0)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_token_report(self, mint: str) -> RugcheckReport | None:
        """Summary report for ``mint``, or None when there is nothing usable.

        Unknown mints (404) and unexpected statuses give None straight away.
        A 429 or a dropped connection is retried with backoff; once the
        attempts run out the scoring stage sees None and records a failure.
        """
        url = f"{BASE_URL}/tokens/{mint}/report/summary"

        for attempt in range(MAX_RETRIES + 1):
            last_attempt = attempt == MAX_RETRIES
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.get(url)
            except _TRANSIENT as e:
                if last_attempt:
                    logger.warning(f"[RUGCHECK] {mint[:12]} unreachable after {attempt + 1} tries: {e}")
                    return None
                logger.debug(f"[RUGCHECK] {type(e).__name__} on {mint[:12]}, backing off")
                await asyncio.sleep(_backoff(attempt))
                continue

            if resp.status_code == 200:
                return _parse_report(resp.json(), mint)
            if resp.status_code == 429:
                logger.debug(f"[RUGCHECK] Throttled on {mint[:12]} (attempt {attempt + 1})")
                if not last_attempt:
                    await asyncio.sleep(_backoff(attempt))
                continue
            if resp.status_code != 404:
                logger.debug(f"[RUGCHECK] {mint[:12]} answered HTTP {resp.status_code}")
            return None

        logger.warning(f"[RUGCHECK] {mint[:12]} still throttled, giving up")
        return None


def _parse_report(data: dict, mint: str) -> RugcheckReport:
    # score_normalised can be null for brand-new mints
    risks = [
        RugcheckRisk(
            name=item.get("name") or "unknown",
            description=item.get("description") or "",
            level=item.get("level") or "info",
            score=item.get("score") or 0,
        )
        for item in data.get("risks") or []
    ]
    return RugcheckReport(
        score=data.get("score") or 0,
        score_normalised=float(data.get("score_normalised") or 0),
        risks=risks,
        mint=mint,
    )
