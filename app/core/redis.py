"""
Optional async Redis client for the admin session store. If redis_url is empty, returns None.
If redis_url is set but the server is unreachable, startup fails rather than silently
falling back to per-process sessions.
"""
import logging
from typing import Any

from app.config import get_settings

logger = logging.getLogger(__name__)

_redis_client: Any = None


async def get_redis_client() -> Any:
    """Lazy singleton: one async Redis client or None if disabled."""
    global _redis_client
    if _redis_client is not None:
        return _redis_client
    url = (get_settings().redis_url or "").strip()
    if not url:
        return None
    from redis.asyncio import Redis

    client = Redis.from_url(url, decode_responses=True)
    await client.ping()
    _redis_client = client
    logger.info("Redis connected: %s", url.split("@")[-1] if "@" in url else url)
    return _redis_client


async def close_redis() -> None:
    """Graceful shutdown: close Redis connection."""
    global _redis_client
    if _redis_client is not None:
        try:
            await _redis_client.aclose()
        except Exception as e:
            logger.warning("Redis close error: %s", e)
        _redis_client = None
