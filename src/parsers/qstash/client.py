"""Upstash QStash client — delayed HTTP delivery with retry/backoff on non-2xx."""

import httpx
from loguru import logger

from src.parsers.qstash.exceptions import QStashError, QStashRejectedError
from src.parsers.qstash.models import DispatchJob

DEFAULT_BASE_URL = "https://qstash.upstash.io"


class QStashClient:
    """Publishes JSON jobs. Delivery retries are QStash's job, not ours."""

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=10.0,
            headers={"Authorization": f"Bearer {token}"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def publish(self, job: DispatchJob) -> str:
        """Submit one job, returning the QStash message id.

        Raises QStashRejectedError on non-2xx, QStashError on transport failure.
        """
        headers = {"Content-Type": "application/json"}
        if job.not_before_unix is not None:
            headers["Upstash-Not-Before"] = str(job.not_before_unix)

        try:
            resp = await self._client.post(
                f"{self._base_url}/v2/publish/{job.url}",
                json=job.body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise QStashError(f"{type(e).__name__}: {e}") from e

        if resp.status_code >= 300:
            raise QStashRejectedError(resp.status_code, resp.text)

        message_id = resp.json().get("messageId", "")
        logger.debug(f"[QSTASH] Published {message_id} -> {job.url}")
        return message_id
