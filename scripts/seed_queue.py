"""Seed a rotation backlog in Redis.

Input order is rotation order: the first id is the first one dispatched.

Usage:
    poetry run python scripts/seed_queue.py refresh --from-candidates
    poetry run python scripts/seed_queue.py outreach --file user_ids.txt
    cat ids.txt | poetry run python scripts/seed_queue.py outreach --reset
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger  # noqa: E402
from sqlalchemy import select  # noqa: E402

from config.settings import settings  # noqa: E402
from src.db.database import create_engine, create_session_factory  # noqa: E402
from src.db.redis import close_redis, create_redis  # noqa: E402
from src.models.token import CandidateToken  # noqa: E402
from src.pipeline.durable_queue import RedisListQueue  # noqa: E402
from src.utils.logger import setup_logger  # noqa: E402

BATCH_SIZE = 500

QUEUE_KEYS = {
    "outreach": settings.outreach_queue_key,
    "refresh": settings.refresh_queue_key,
}


def read_ids(lines) -> list[str]:
    """Strip blanks and comments; keep duplicates (the queue allows them)."""
    ids = []
    for line in lines:
        value = line.strip()
        if value and not value.startswith("#"):
            ids.append(value)
    return ids


async def load_candidate_addresses() -> list[str]:
    engine = create_engine(settings.database_url)
    try:
        factory = create_session_factory(engine)
        async with factory() as session:
            result = await session.execute(
                select(CandidateToken.token_address).order_by(CandidateToken.discovered_at)
            )
            return list(result.scalars().all())
    finally:
        await engine.dispose()


async def seed(queue: RedisListQueue, key: str, ids: list[str], *, reset: bool = False) -> int:
    """Push ids onto the head in batches, so ids[0] ends up nearest the tail."""
    if reset:
        await queue.clear(key)
        logger.info(f"[SEED] Cleared {key}")

    for start in range(0, len(ids), BATCH_SIZE):
        batch = ids[start:start + BATCH_SIZE]
        await queue.push_head(key, *batch)
        logger.info(f"[SEED] Pushed batch {start // BATCH_SIZE + 1} ({len(batch)} ids)")

    size = await queue.length(key)
    logger.info(f"[SEED] Seeded {len(ids)} ids to {key} (size now {size})")
    return size


async def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a rotation backlog")
    parser.add_argument("queue", choices=sorted(QUEUE_KEYS))
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--file", type=Path, help="One id per line (default: stdin)")
    source.add_argument(
        "--from-candidates", action="store_true",
        help="Use every candidate token address from the database",
    )
    parser.add_argument("--reset", action="store_true", help="Delete the queue first")
    args = parser.parse_args()

    setup_logger(level="INFO")

    if args.from_candidates:
        ids = await load_candidate_addresses()
    elif args.file:
        ids = read_ids(args.file.read_text().splitlines())
    else:
        ids = read_ids(sys.stdin)

    if not ids:
        logger.warning("[SEED] No ids to push")
        return

    redis = create_redis(settings.redis_url)
    try:
        await seed(RedisListQueue(redis), QUEUE_KEYS[args.queue], ids, reset=args.reset)
    finally:
        await close_redis(redis)


if __name__ == "__main__":
    asyncio.run(main())
