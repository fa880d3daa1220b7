"""Password reset token storage interface and implementations.

Reset tokens are single use: ``take`` removes the entry in the same step that
reads it, so two concurrent consumers can never both receive the record.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime

from cachetools import TTLCache
from loguru import logger
from pydantic import BaseModel

from src.savemate.entities._base import UtcDatetime, utc_now
from src.savemate.runtime.config.config_data import PasswordResetConfig, RedisConfig


class ResetTokenRecord(BaseModel):
    """What a reset token maps to."""

    user_id: str
    expires_at: UtcDatetime

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) >= self.expires_at


class ResetTokenStore(ABC):
    """Abstract interface for reset token backends."""

    @abstractmethod
    async def put(self, token: str, record: ResetTokenRecord, ttl_seconds: int) -> None:
        """Store a record under ``token`` for at most ``ttl_seconds``."""

    @abstractmethod
    async def take(self, token: str) -> ResetTokenRecord | None:
        """Atomically remove and return the record, or None if absent."""

    @abstractmethod
    async def ping(self) -> bool:
        """Whether the backend can currently serve requests."""


class InMemoryResetTokenStore(ResetTokenStore):
    """Process-local store; entries are evicted by the cache once the TTL passes."""

    def __init__(self, ttl_seconds: int, max_entries: int = 10_000) -> None:
        self._cache: TTLCache[str, ResetTokenRecord] = TTLCache(
            maxsize=max_entries, ttl=ttl_seconds
        )
        self._lock = threading.Lock()

    async def put(self, token: str, record: ResetTokenRecord, ttl_seconds: int) -> None:
        with self._lock:
            self._cache[token] = record

    async def take(self, token: str) -> ResetTokenRecord | None:
        with self._lock:
            return self._cache.pop(token, None)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class RedisResetTokenStore(ResetTokenStore):
    """Redis-backed store using SET EX and GETDEL."""

    def __init__(self, redis_client, key_prefix: str = "pwreset:") -> None:
        self._redis = redis_client
        self._prefix = key_prefix

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def put(self, token: str, record: ResetTokenRecord, ttl_seconds: int) -> None:
        try:
            await self._redis.set(self._key(token), record.model_dump_json(), ex=ttl_seconds)
        except Exception as e:
            raise RuntimeError(f"Redis set failed: {e}") from e

    async def take(self, token: str) -> ResetTokenRecord | None:
        try:
            data = await self._redis.getdel(self._key(token))
        except Exception as e:
            raise RuntimeError(f"Redis getdel failed: {e}") from e

        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return ResetTokenRecord.model_validate_json(data)

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except Exception as e:
            logger.warning("Redis ping failed: {}", e)
            return False


def create_reset_token_store(
    reset_config: PasswordResetConfig, redis_config: RedisConfig
) -> ResetTokenStore:
    """Build the store selected by ``password_reset.backend``."""
    if reset_config.backend == "redis":
        if not redis_config.url:
            raise RuntimeError("password_reset.backend is 'redis' but redis.url is empty")

        import redis.asyncio as redis_async

        client = redis_async.from_url(
            redis_config.connection_string,
            encoding="utf-8",
            decode_responses=redis_config.decode_responses,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        logger.info("Password reset tokens: redis store")
        return RedisResetTokenStore(client, key_prefix=reset_config.key_prefix)

    logger.info("Password reset tokens: in-memory store")
    return InMemoryResetTokenStore(
        ttl_seconds=reset_config.ttl_seconds, max_entries=reset_config.max_entries
    )
