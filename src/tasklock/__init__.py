"""Distributed task locks over a shared key-value store.

Lets independent worker processes agree that at most one of them runs a
given logical task at a time:
- Lock keys derived from task name and arguments
- Lease-based locks with stale-owner recovery
- Acquire / run / release wrapping for task bodies
- Redis and in-memory stores

Example:
    from tasklock import locked_task

    @locked_task("UpdateNetworkGraph", lock_timeout=3600)
    async def update_network_graph(repo_id: int) -> None:
        await heavy_lifting(repo_id)

    await update_network_graph(42)  # Skipped if another worker holds it
"""

from tasklock.errors import DecodeError, LivenessProbeError, StoreUnavailable, TaskLockError
from tasklock.execution import (
    LockedTask,
    get_task_lock,
    locked_task,
    run_with_lock,
    set_task_lock,
)
from tasklock.keys import LockKeys, default_identifier
from tasklock.lock import DENIED, LockResult, TaskLock
from tasklock.record import LockRecord
from tasklock.store import LockStore, MemoryLockStore, RedisLockStore

__version__ = "0.1.0"

__all__ = [
    # Keys
    "LockKeys",
    "default_identifier",
    # Lock
    "TaskLock",
    "LockResult",
    "LockRecord",
    "DENIED",
    # Execution
    "LockedTask",
    "run_with_lock",
    "locked_task",
    "get_task_lock",
    "set_task_lock",
    # Stores
    "LockStore",
    "MemoryLockStore",
    "RedisLockStore",
    # Errors
    "TaskLockError",
    "StoreUnavailable",
    "DecodeError",
    "LivenessProbeError",
]
