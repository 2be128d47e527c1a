"""Round-robin traversal over a persistent backlog."""

from typing import Protocol

from loguru import logger

from src.pipeline.exceptions import QueueEmpty


class RotatingQueue(Protocol):
    async def rotate(self, key: str, count: int) -> list[str]: ...


class QueueRotator:
    """Advance a queue by up to ``batch_size`` items per call.

    Each returned item has already been re-inserted at the head, so it comes
    around again only after every other current item has been returned.
    """

    def __init__(self, queue: RotatingQueue) -> None:
        self._queue = queue

    async def rotate(self, queue_key: str, batch_size: int) -> list[str]:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        items = await self._queue.rotate(queue_key, batch_size)
        if not items:
            raise QueueEmpty(queue_key)

        logger.debug(f"[ROTATE] {queue_key}: {len(items)}/{batch_size} items")
        return items
