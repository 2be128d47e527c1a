"""Hand rotated items to QStash, one job each, staggered under an RPS ceiling."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from loguru import logger

from src.parsers.qstash.models import DispatchJob


class JobPublisher(Protocol):
    async def publish(self, job: DispatchJob) -> str: ...


@dataclass
class DispatchResult:
    item: str
    success: bool
    message_id: str | None = None
    error: str | None = None


def stagger_offset(index: int, rps_limit: int | None) -> int:
    """Seconds of delay for the index-th job: floor(index / rps_limit)."""
    if rps_limit is None:
        return 0
    return index // rps_limit


def build_jobs(
    items: list[str],
    endpoint: str,
    *,
    payload_key: str,
    rps_limit: int | None = None,
    now: datetime | None = None,
) -> list[DispatchJob]:
    """One job per item. ``endpoint`` may contain ``{item}``."""
    if rps_limit is not None and rps_limit <= 0:
        raise ValueError(f"rps_limit must be positive, got {rps_limit}")
    now = now or datetime.now(UTC)

    jobs = []
    for i, item in enumerate(items):
        offset = stagger_offset(i, rps_limit)
        jobs.append(DispatchJob(
            url=endpoint.replace("{item}", item),
            body={payload_key: item},
            not_before=now + timedelta(seconds=offset) if rps_limit else None,
        ))
    return jobs


class TaskDispatcher:
    """Submits jobs concurrently; a rejected submission fails only its own item."""

    def __init__(self, publisher: JobPublisher) -> None:
        self._publisher = publisher

    async def dispatch(
        self,
        items: list[str],
        endpoint: str,
        rps_limit: int | None = None,
        *,
        payload_key: str = "item",
        now: datetime | None = None,
    ) -> list[DispatchResult]:
        jobs = build_jobs(
            items, endpoint, payload_key=payload_key, rps_limit=rps_limit, now=now
        )
        outcomes = await asyncio.gather(
            *(self._publisher.publish(job) for job in jobs),
            return_exceptions=True,
        )

        results: list[DispatchResult] = []
        for item, outcome in zip(items, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"[DISPATCH] {item[:16]} rejected: {outcome}")
                results.append(DispatchResult(item=item, success=False, error=str(outcome)))
            else:
                results.append(DispatchResult(item=item, success=True, message_id=outcome))

        failed = sum(1 for r in results if not r.success)
        logger.info(
            f"[DISPATCH] {len(results) - failed}/{len(results)} jobs submitted"
            + (f" (rps={rps_limit})" if rps_limit else "")
        )
        return results
