"""Redis lock store for task locks.

Maps the lock store primitives onto Redis commands:
- create_if_absent: SET key value NX
- read: GET
- swap: SET key value GET
- delete: DEL
- exists: EXISTS
- compare_and_swap: Lua script (GET, compare, SET)

Redis failures surface as StoreUnavailable.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from tasklock.config import settings
from tasklock.errors import StoreUnavailable
from tasklock.store.base import LockStore

if TYPE_CHECKING:
    from redis.asyncio import Redis

# Module-level connection pool
_redis_client: Redis | None = None

# Replace only if the current value is still the one we read
COMPARE_AND_SWAP_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    redis.call("set", KEYS[1], ARGV[2])
    return 1
else
    return 0
end
"""


async def get_redis() -> Redis:
    """Get or create the Redis client.

    Uses connection pooling for efficient connection management.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url,
            decode_responses=False,  # Lock records are stored as bytes
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def _as_bytes(value: Any) -> bytes | None:
    if value is None:
        return None
    return value.encode() if isinstance(value, str) else bytes(value)


class RedisLockStore(LockStore):
    """Lock store backed by a shared Redis instance."""

    supports_compare_and_swap = True

    def __init__(self, client: Redis):
        self.client = client

    async def create_if_absent(self, key: str, value: bytes) -> bool:
        try:
            created = await self.client.set(key, value, nx=True)
        except RedisError as e:
            raise StoreUnavailable("create_if_absent", key, str(e)) from e
        return bool(created)

    async def read(self, key: str) -> bytes | None:
        try:
            value = await self.client.get(key)
        except RedisError as e:
            raise StoreUnavailable("read", key, str(e)) from e
        return _as_bytes(value)

    async def swap(self, key: str, value: bytes) -> bytes | None:
        try:
            previous = await self.client.set(key, value, get=True)
        except RedisError as e:
            raise StoreUnavailable("swap", key, str(e)) from e
        return _as_bytes(previous)

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as e:
            raise StoreUnavailable("delete", key, str(e)) from e

    async def exists(self, key: str) -> bool:
        try:
            count = await self.client.exists(key)
        except RedisError as e:
            raise StoreUnavailable("exists", key, str(e)) from e
        return count > 0

    async def compare_and_swap(self, key: str, expected: bytes, value: bytes) -> bool:
        try:
            result = await cast(
                Awaitable[int],
                self.client.eval(COMPARE_AND_SWAP_SCRIPT, 1, key, expected, value),
            )
        except RedisError as e:
            raise StoreUnavailable("compare_and_swap", key, str(e)) from e
        return bool(result)

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except RedisError:
            return False
