"""
Admin session store. A session is an opaque random token; a token is valid while it is in the store.
In-memory by default (lost on restart); Redis-backed when redis_url is set so tokens survive restarts
and are shared between workers. Optional TTL from settings.session_ttl_minutes (0 = no expiry).
"""
import logging
import secrets
import time
from typing import Any, Callable

from app.config import get_settings
from app.core.redis import get_redis_client

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"
TOKEN_BYTES = 32


def new_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


class InMemorySessionStore:
    """Token -> expiry timestamp (None = never). Lives for the process lifetime."""

    def __init__(self, ttl_seconds: int | None = None, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds or None
        self._clock = clock
        self._tokens: dict[str, float | None] = {}

    async def create(self) -> str:
        token = new_token()
        self._tokens[token] = self._clock() + self._ttl if self._ttl else None
        return token

    async def is_valid(self, token: str) -> bool:
        if token not in self._tokens:
            return False
        expires_at = self._tokens[token]
        if expires_at is not None and self._clock() >= expires_at:
            del self._tokens[token]
            return False
        return True

    async def revoke(self, token: str) -> bool:
        if token not in self._tokens:
            return False
        del self._tokens[token]
        return True

    async def clear(self) -> None:
        self._tokens.clear()

    def __len__(self) -> int:
        return len(self._tokens)


class RedisSessionStore:
    """
    Redis-backed store. One key per token: session:{token} = "1", with EXPIRE when a TTL is set.
    Redis errors propagate; an unreachable store must not authorize anybody.
    """

    def __init__(self, redis_client: Any, ttl_seconds: int | None = None):
        self._redis = redis_client
        self._ttl = ttl_seconds or None

    @staticmethod
    def _key(token: str) -> str:
        return f"{SESSION_KEY_PREFIX}{token}"

    async def create(self) -> str:
        token = new_token()
        await self._redis.set(self._key(token), "1", ex=self._ttl)
        return token

    async def is_valid(self, token: str) -> bool:
        return bool(await self._redis.exists(self._key(token)))

    async def revoke(self, token: str) -> bool:
        return bool(await self._redis.delete(self._key(token)))

    async def clear(self) -> None:
        keys = [key async for key in self._redis.scan_iter(match=f"{SESSION_KEY_PREFIX}*")]
        if keys:
            await self._redis.delete(*keys)


_session_store: InMemorySessionStore | RedisSessionStore | None = None


def _ttl_seconds() -> int | None:
    minutes = get_settings().session_ttl_minutes
    return minutes * 60 if minutes > 0 else None


async def init_session_store() -> InMemorySessionStore | RedisSessionStore:
    """Build the process-wide store. Called from the app lifespan."""
    global _session_store
    client = await get_redis_client()
    if client is not None:
        _session_store = RedisSessionStore(client, ttl_seconds=_ttl_seconds())
        logger.info("Admin sessions stored in Redis")
    else:
        _session_store = InMemorySessionStore(ttl_seconds=_ttl_seconds())
        logger.info("Admin sessions stored in memory (lost on restart)")
    return _session_store


async def close_session_store() -> None:
    global _session_store
    if isinstance(_session_store, InMemorySessionStore):
        await _session_store.clear()
    _session_store = None


def get_session_store() -> InMemorySessionStore | RedisSessionStore:
    """FastAPI dependency. Falls back to an in-memory store if the lifespan has not run."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore(ttl_seconds=_ttl_seconds())
    return _session_store
