from redis.asyncio import Redis


def create_redis(url: str) -> Redis:
    """Build a Redis client. Called once at startup, closed on shutdown."""
    return Redis.from_url(url, decode_responses=True)


async def close_redis(client: Redis | None) -> None:
    if client:
        await client.aclose()
