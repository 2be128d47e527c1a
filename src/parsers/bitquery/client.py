"""Bitquery streaming API client — PumpSwap pool creations (pump.fun graduations)."""

import asyncio

import httpx
from loguru import logger

from src.parsers.bitquery.exceptions import BitqueryApiError, BitqueryAuthError
from src.parsers.bitquery.models import GraduatedToken
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://streaming.bitquery.io/eap"
PUMPSWAP_PROGRAM = "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA"
WSOL_MINT = "So11111111111111111111111111111111111111112"
MAX_RETRIES = 2
RETRY_DELAYS = [2.0, 5.0]

POOL_QUERY = """
query ($limit: Int!) {
  Solana {
    Instructions(
      where: {
        Instruction: {
          CallerIndex: { eq: 2 }
          Depth: { eq: 1 }
          CallPath: { includes: { eq: 2 } }
          Program: {
            Method: { is: "create_pool" }
            Address: { is: "%s" }
          }
        }
      }
      limit: { count: $limit }
      orderBy: { descending: Block_Time }
    ) {
      Block { Time }
      Transaction { Signer Result { Success } }
      Instruction { Accounts { Address Token { Mint } } }
    }
  }
}
""" % PUMPSWAP_PROGRAM


class BitqueryClient:
    """Async GraphQL client for Bitquery (bearer token)."""

    def __init__(self, access_token: str, max_rps: float = 2.0) -> None:
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            timeout=20.0,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def query(self, query: str, variables: dict | None = None) -> dict:
        """POST a GraphQL query, returning the ``data`` object.

        Raises BitqueryError subclasses; the caller cannot make progress
        without this data.
        """
        payload = {"query": query, "variables": variables or {}}

        for attempt in range(MAX_RETRIES + 1):
            try:
                await self._rate_limiter.acquire()
                resp = await self._client.post(BASE_URL, json=payload)

                if resp.status_code in (401, 403):
                    raise BitqueryAuthError(f"HTTP {resp.status_code}: check access token")
                if resp.status_code == 429 and attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[BITQUERY] Rate limited, waiting {delay}s")
                    await asyncio.sleep(delay)
                    continue
                if resp.status_code != 200:
                    raise BitqueryApiError(f"HTTP {resp.status_code}: {resp.text[:200]}")

                body = resp.json()
                if body.get("errors"):
                    raise BitqueryApiError(str(body["errors"])[:300])
                return body.get("data") or {}

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    logger.debug(f"[BITQUERY] {type(e).__name__}, retry in {delay}s")
                    await asyncio.sleep(delay)
                else:
                    raise BitqueryApiError(
                        f"Failed after {MAX_RETRIES + 1} attempts: {e}"
                    ) from e

        raise BitqueryApiError("Rate limited on every attempt")

    async def get_recently_graduated_tokens(self, limit: int = 10) -> list[GraduatedToken]:
        """Most recent PumpSwap pools whose non-WSOL side is a pump.fun mint."""
        data = await self.query(POOL_QUERY, {"limit": limit})
        instructions = data.get("Solana", {}).get("Instructions", []) or []
        tokens = [t for t in (_parse_pool(i) for i in instructions) if t is not None]
        logger.debug(f"[BITQUERY] {len(tokens)} graduated of {len(instructions)} pools")
        return tokens


def _parse_pool(item: dict) -> GraduatedToken | None:
    """Map one create_pool instruction to a GraduatedToken.

    Pools must pair exactly one ``...pump`` mint with one other non-WSOL mint.
    """
    accounts = (item.get("Instruction") or {}).get("Accounts") or []
    mints: list[str] = []
    for acc in accounts:
        mint = (acc.get("Token") or {}).get("Mint")
        if mint and mint != WSOL_MINT and mint not in mints:
            mints.append(mint)

    pump_token = next((m for m in mints if m.lower().endswith("pump")), None)
    lp_token = next((m for m in mints if m != pump_token), None)
    if not pump_token or not lp_token or len(mints) != 2:
        return None

    tx = item.get("Transaction") or {}
    return GraduatedToken(
        creator=tx.get("Signer", ""),
        success=bool((tx.get("Result") or {}).get("Success", False)),
        pump_token=pump_token,
        lp_token=lp_token,
        creation_time=(item.get("Block") or {}).get("Time", ""),
    )
