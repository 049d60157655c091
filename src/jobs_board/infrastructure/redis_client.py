"""Redis connection for the shared poster token store.

Only the redis token store backend needs it; the file backend never
connects. One client per process, created on first use.

Usage:
    from jobs_board.infrastructure.redis_client import init_redis, close_redis

    redis = await init_redis(settings)
    await redis.hset("jobs_board:poster_tokens", "job_1", "tok")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import redis.asyncio as aioredis

from jobs_board.config import get_settings
from jobs_board.logging_config import get_logger

if TYPE_CHECKING:
    from jobs_board.config import Settings

logger = get_logger(__name__)

_redis_client: aioredis.Redis | None = None


async def init_redis(settings: Settings | None = None) -> aioredis.Redis:
    """Connect (once) and verify the server answers; tokens are read as str."""
    global _redis_client
    if _redis_client is not None:
        return _redis_client
    settings = settings or get_settings()
    client = aioredis.from_url(settings.redis_url, decode_responses=True)
    await client.ping()
    _redis_client = client
    logger.info("redis.connected", url=settings.redis_url)
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        logger.info("redis.disconnected")
        _redis_client = None
