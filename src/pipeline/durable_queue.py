"""Redis list backlog: opaque ids rotated tail → head, never deleted.

Orientation: LPUSH adds at the head (index 0), RPOP takes the tail (index -1).
"""

from redis.asyncio import Redis


class RedisListQueue:
    """Durable queue over Redis lists.

    ``rotate`` is the only method the scheduler uses: every LMOVE of a batch
    runs inside one MULTI/EXEC, so two overlapping ticks cannot interleave
    their moves and a crash cannot leave an item popped but not re-pushed.
    """

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    async def length(self, key: str) -> int:
        return await self._redis.llen(key)

    async def pop_tail(self, key: str) -> str | None:
        return await self._redis.rpop(key)

    async def push_head(self, key: str, *items: str) -> int:
        """LPUSH items in order; the last argument ends up at index 0."""
        if not items:
            return await self.length(key)
        return await self._redis.lpush(key, *items)

    async def clear(self, key: str) -> None:
        await self._redis.delete(key)

    async def rotate(self, key: str, count: int) -> list[str]:
        """Atomically move up to ``count`` items from tail to head.

        Capped at the current length so a short queue never yields the same
        item twice in one call. Returned in pop order.
        """
        size = await self._redis.llen(key)
        n = min(count, size)
        if n <= 0:
            return []

        pipe = self._redis.pipeline(transaction=True)
        for _ in range(n):
            pipe.lmove(key, key, "RIGHT", "LEFT")
        moved = await pipe.execute()
        # A concurrent trim between LLEN and EXEC shows up as None entries
        return [item for item in moved if item is not None]
