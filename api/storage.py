"""Record storage with Redis backend and in-memory fallback."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any, AsyncIterator

import redis.asyncio as redis
from redis.exceptions import RedisError

from config import config

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Abstract key/value store for persisted records."""

    @abstractmethod
    async def get(self, key: str) -> dict[str, Any] | None:
        """Get a record."""
        ...

    @abstractmethod
    async def set(self, key: str, data: dict[str, Any], ttl: int | None = None) -> None:
        """Set a record."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a record."""
        ...

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None


class InMemoryRecordStore(RecordStore):
    """In-memory record store for local development and tests."""

    def __init__(self) -> None:
        self._records: dict[str, tuple[str, datetime]] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        if key not in self._records:
            return None

        payload, expiry = self._records[key]
        if expiry < datetime.now():
            await self.delete(key)
            return None

        return json.loads(payload)

    async def set(self, key: str, data: dict[str, Any], ttl: int | None = None) -> None:
        # Kept as JSON text, like the Redis store
        ttl = ttl or config.record_ttl
        expiry = datetime.now() + timedelta(seconds=ttl)
        self._records[key] = (json.dumps(data), expiry)

    async def delete(self, key: str) -> None:
        self._records.pop(key, None)

    async def cleanup_expired(self) -> int:
        """Remove expired records."""
        now = datetime.now()
        expired = [key for key, (_, expiry) in self._records.items() if expiry < now]
        for key in expired:
            del self._records[key]
        return len(expired)


class RedisRecordStore(RecordStore):
    """Redis-backed record store."""

    def __init__(self, redis_client: redis.Redis) -> None:
        self._redis = redis_client
        self._prefix = "highlow:"

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> dict[str, Any] | None:
        data = await self._redis.get(self._key(key))
        if data is None:
            return None
        return json.loads(data)

    async def set(self, key: str, data: dict[str, Any], ttl: int | None = None) -> None:
        ttl = ttl or config.record_ttl
        await self._redis.setex(self._key(key), ttl, json.dumps(data))

    async def delete(self, key: str) -> None:
        await self._redis.delete(self._key(key))

    async def exists(self, key: str) -> bool:
        return await self._redis.exists(self._key(key)) > 0


# Global record store instance
_record_store: RecordStore | None = None


async def get_record_store() -> RecordStore:
    """Get or create the record store, preferring Redis when reachable."""
    global _record_store

    if _record_store is not None:
        return _record_store

    try:
        redis_client = redis.from_url(config.redis.url)
        await redis_client.ping()
        _record_store = RedisRecordStore(redis_client)
        logger.info("Using Redis record store at %s:%d", config.redis.host, config.redis.port)
        return _record_store
    except (RedisError, OSError) as exc:
        logger.warning("Redis unavailable (%s); using in-memory record store", exc)

    _record_store = InMemoryRecordStore()
    return _record_store


def set_record_store(store: RecordStore | None) -> None:
    """Replace the global record store (None resets to lazy creation)."""
    global _record_store
    _record_store = store


# One lock per record key; each entry point holds it across load, mutate, save.
# Entries live only while some task holds or waits on the key.
_record_locks: dict[str, asyncio.Lock] = {}
_lock_users: dict[str, int] = {}


@asynccontextmanager
async def record_lock(key: str) -> AsyncIterator[None]:
    """Serialize operations against one record."""
    lock = _record_locks.setdefault(key, asyncio.Lock())
    _lock_users[key] = _lock_users.get(key, 0) + 1
    try:
        async with lock:
            yield
    finally:
        _lock_users[key] -= 1
        if not _lock_users[key]:
            del _lock_users[key]
            del _record_locks[key]
