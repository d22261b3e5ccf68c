"""Lock store backends.

Any store offering atomic create-if-absent, read, swap, delete and
exists can back a task lock:
- RedisLockStore: shared Redis instance (production)
- MemoryLockStore: in-process dict (tests, single process)
"""

from tasklock.store.base import LockStore
from tasklock.store.memory import MemoryLockStore
from tasklock.store.redis import RedisLockStore, close_redis, get_redis

__all__ = [
    "LockStore",
    "MemoryLockStore",
    "RedisLockStore",
    "get_redis",
    "close_redis",
]
