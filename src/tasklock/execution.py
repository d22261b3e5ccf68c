"""Run task bodies under a task lock.

A task type describes how its lock behaves: the lease length, how the
lock key is derived from the task arguments, and optional callbacks for
lock contention and for a lease that ran out before the body finished.

Protocol for each run:
1. Acquire the lock for the task arguments
2. If denied, call on_lock_failed and skip the body
3. Run the body
4. On every exit path, decide whether to release:
   - held without timeout: release
   - lease still valid: release
   - lease ran out: another worker may have stolen the lock, so call
     on_expired_before_release and leave the key alone

Example:
    report = LockedTask("Report", lock_timeout=3600)

    async def build() -> None:
        ...

    await run_with_lock(report, ["acct-1"], build)

    # Or as decorator
    @locked_task("Report", lock_timeout=3600)
    async def build_report(account_id: str) -> None:
        ...

    await build_report("acct-1")
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ParamSpec, TypeVar

from tasklock.config import settings
from tasklock.keys import LockKeys, default_identifier
from tasklock.lock import LockResult, TaskLock
from tasklock.observability.logging import LogContext
from tasklock.store.redis import RedisLockStore, get_redis

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Callbacks receive the task arguments and may be sync or async
LockCallback = Callable[..., Awaitable[None] | None]

_task_lock: TaskLock | None = None


async def get_task_lock() -> TaskLock:
    """Get or create the process-wide Redis-backed task lock."""
    global _task_lock
    if _task_lock is None:
        _task_lock = TaskLock(RedisLockStore(await get_redis()))
    return _task_lock


def set_task_lock(lock: TaskLock | None) -> None:
    """Replace the process-wide task lock (None resets to Redis)."""
    global _task_lock
    _task_lock = lock


@dataclass
class LockedTask:
    """Lock settings for one task type.

    Args:
        name: Task type name, part of every lock key
        lock_timeout: Seconds the lock may be held; 0 or below holds until
            released (default from settings)
        identifier: Builds the argument part of the lock key
        lock_key_fn: Replaces the whole key derivation when set
        on_lock_failed: Called with the task arguments when the lock is held
        on_expired_before_release: Called with the task arguments when the
            lease ran out before the body finished
    """

    name: str
    lock_timeout: int | None = None
    identifier: Callable[..., str | None] = default_identifier
    lock_key_fn: Callable[..., str] | None = None
    on_lock_failed: LockCallback | None = None
    on_expired_before_release: LockCallback | None = None

    @property
    def timeout(self) -> int:
        if self.lock_timeout is None:
            return settings.default_lock_timeout
        return self.lock_timeout

    def lock_key(self, *args: Any) -> str:
        """Lock key for a run with these arguments."""
        if self.lock_key_fn is not None:
            return self.lock_key_fn(*args)
        return LockKeys.build(self.name, self.identifier(*args))

    async def is_locked(self, *args: Any, lock: TaskLock | None = None) -> bool:
        """Check if a run with these arguments currently holds the lock."""
        lock = lock or await get_task_lock()
        return await lock.locked(self.lock_key(*args))


async def _call(callback: LockCallback, args: Sequence[Any]) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


async def run_with_lock(
    task: LockedTask,
    args: Sequence[Any],
    body: Callable[[], Awaitable[R]],
    lock: TaskLock | None = None,
) -> R | None:
    """Run ``body`` only if this worker gets the task's lock.

    Args:
        task: Task type lock settings
        args: Task arguments, used for the lock key and callbacks
        body: The task logic
        lock: Task lock to use (default: process-wide Redis lock)

    Returns:
        The body's result, or None if the lock was held elsewhere

    Raises:
        Whatever the body raised, unchanged. If the body succeeded, errors
        from releasing or from on_expired_before_release propagate.
    """
    lock = lock or await get_task_lock()
    key = task.lock_key(*args)

    with LogContext(task=task.name, lock_key=key):
        result = await lock.acquire(key, task.timeout)
        if not result:
            logger.info(f"Skipping {task.name}: lock '{key}' is held")
            if task.on_lock_failed is not None:
                await _call(task.on_lock_failed, args)
            return None

        try:
            value = await body()
        except BaseException:
            # The body's error wins over a failing release decision
            try:
                await _finish(task, args, key, result, lock)
            except Exception:
                logger.exception(f"Release decision for '{key}' failed after {task.name} failed")
            raise

        await _finish(task, args, key, result, lock)
        return value


async def _finish(
    task: LockedTask,
    args: Sequence[Any],
    key: str,
    result: LockResult,
    lock: TaskLock,
) -> None:
    """Release the lock unless the lease ran out while the body ran."""
    if result.expired(lock.now()):
        # The key may belong to a worker that stole it
        logger.warning(f"Lock '{key}' expired before {task.name} finished; not releasing")
        if task.on_expired_before_release is not None:
            await _call(task.on_expired_before_release, args)
        return

    await lock.release(key)


def locked_task(
    name: str,
    lock_timeout: int | None = None,
    identifier: Callable[..., str | None] = default_identifier,
    lock_key_fn: Callable[..., str] | None = None,
    on_lock_failed: LockCallback | None = None,
    on_expired_before_release: LockCallback | None = None,
    lock: TaskLock | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R | None]]]:
    """Decorator that runs a task only while holding its lock.

    The decorated function's positional arguments are the task arguments.

    Example:
        @locked_task("UpdateNetworkGraph", lock_timeout=3600)
        async def update_network_graph(repo_id: int) -> None:
            # Only one worker at a time per repo_id
            ...
    """
    task = LockedTask(
        name=name,
        lock_timeout=lock_timeout,
        identifier=identifier,
        lock_key_fn=lock_key_fn,
        on_lock_failed=on_lock_failed,
        on_expired_before_release=on_expired_before_release,
    )

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R | None]]:
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R | None:
            return await run_with_lock(task, args, lambda: func(*args, **kwargs), lock=lock)

        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        wrapper.locked_task = task  # type: ignore[attr-defined]
        return wrapper

    return decorator
