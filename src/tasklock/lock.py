"""Lease-based task lock on top of a shared key-value store.

Only uses create-if-absent, read, swap, delete and exists from the store
(plus compare-and-swap where the store offers it). There is no expiry
daemon: an expired lock is only noticed by the next acquisition attempt
against the same key.

Acquisition:
1. Build a candidate record {lock_until, pid} for this process
2. Without a timeout: create-if-absent decides, nothing else
3. With a timeout: create-if-absent; if the key exists, read the holder
4. If the holder's lease ran out and its process is gone, steal the key
5. Otherwise the lock is held and the attempt is denied

Example:
    lock = TaskLock(RedisLockStore(await get_redis()))

    result = await lock.acquire("lock:Report:acct-1", timeout=60)
    if result:
        try:
            await build_report()
        finally:
            await lock.release("lock:Report:acct-1")
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable

from tasklock.errors import LivenessProbeError
from tasklock.liveness import process_alive
from tasklock.record import LockRecord
from tasklock.store.base import LockStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockResult:
    """Outcome of one acquisition attempt.

    Falsy when denied. ``lock_until`` is None for a lock held without a
    timeout, otherwise the epoch second at which the lease runs out.
    """

    acquired: bool
    lock_until: int | None = None

    @property
    def indefinite(self) -> bool:
        """Acquired without a timeout; held until released."""
        return self.acquired and self.lock_until is None

    def expired(self, now: int) -> bool:
        """True if a timed lease ran out before ``now``."""
        return self.lock_until is not None and self.lock_until < now

    def __bool__(self) -> bool:
        return self.acquired


DENIED = LockResult(acquired=False)
ACQUIRED_INDEFINITELY = LockResult(acquired=True)


def _epoch_seconds() -> int:
    return int(time.time())


class TaskLock:
    """Distributed mutual exclusion keyed by lock key.

    Args:
        store: Shared lock store
        clock: Returns the current epoch second (default: wall clock)
        pid: Owner pid recorded in new locks (default: this process)
        liveness: Returns True if a recorded owner pid is still running
    """

    def __init__(
        self,
        store: LockStore,
        clock: Callable[[], int] = _epoch_seconds,
        pid: int | None = None,
        liveness: Callable[[int], bool] = process_alive,
    ):
        self.store = store
        self.clock = clock
        self.pid = pid if pid is not None else os.getpid()
        self.liveness = liveness

    def now(self) -> int:
        return self.clock()

    async def acquire(self, key: str, timeout: int = 0) -> LockResult:
        """Try once to acquire the lock under ``key``.

        Args:
            key: Lock key
            timeout: Lease length in seconds; 0 or below never expires

        Returns:
            LockResult; falsy when another holder keeps the lock
        """
        if timeout <= 0:
            candidate = LockRecord(lock_until=0, pid=self.pid)
            if await self.store.create_if_absent(key, candidate.to_bytes()):
                logger.debug(f"Acquired lock '{key}' without timeout")
                return ACQUIRED_INDEFINITELY
            logger.debug(f"Lock '{key}' is held")
            return DENIED

        return await self._acquire_with_timeout(key, timeout)

    async def _acquire_with_timeout(self, key: str, timeout: int) -> LockResult:
        now = self.now()
        candidate = LockRecord(lock_until=now + timeout, pid=self.pid)
        payload = candidate.to_bytes()

        if await self.store.create_if_absent(key, payload):
            logger.debug(f"Acquired lock '{key}' until {candidate.lock_until}")
            return LockResult(acquired=True, lock_until=candidate.lock_until)

        raw = await self.store.read(key)
        if raw is None:
            # Released between our create and read; the caller may retry
            logger.debug(f"Lock '{key}' vanished during acquisition")
            return DENIED

        existing = LockRecord.from_bytes(raw, key)
        if existing.expired(now) and not self._owner_alive(existing.pid):
            return await self._steal(key, raw, candidate, now)

        # Try once more; virtually always fails while the key exists
        if await self.store.create_if_absent(key, payload):
            return LockResult(acquired=True, lock_until=candidate.lock_until)

        logger.debug(f"Lock '{key}' is held by pid {existing.pid} until {existing.lock_until}")
        return DENIED

    def _owner_alive(self, pid: int) -> bool:
        """Probe the recorded owner; probe failures count as alive."""
        try:
            return self.liveness(pid)
        except LivenessProbeError as e:
            logger.warning(f"{e}; treating owner as alive")
            return True

    async def _steal(self, key: str, raw: bytes, candidate: LockRecord, now: int) -> LockResult:
        """Replace an expired lock whose owner is dead.

        With compare-and-swap the replacement only lands if the key still
        holds the stale record we read, so exactly one stealer wins.
        Without it, swap and inspect the previous value; a loser puts the
        winner's record back while the key still exists. Between the
        loser's two swaps a third stealer can still take the key, and a
        winner releasing after the existence check gets its record
        restored.
        """
        payload = candidate.to_bytes()
        lock_until = candidate.lock_until

        if self.store.supports_compare_and_swap:
            if await self.store.compare_and_swap(key, raw, payload):
                logger.warning(f"Stole expired lock '{key}' from dead owner")
                return LockResult(acquired=True, lock_until=lock_until)
            logger.warning(f"Lost race stealing lock '{key}'")
            return DENIED

        previous = await self.store.swap(key, payload)
        if previous is None or LockRecord.from_bytes(previous, key).expired(now):
            logger.warning(f"Stole expired lock '{key}' from dead owner")
            return LockResult(acquired=True, lock_until=lock_until)

        if await self.store.exists(key):
            await self.store.swap(key, previous)
        logger.warning(f"Lost race stealing lock '{key}'")
        return DENIED

    async def release(self, key: str) -> None:
        """Release the lock.

        Deletes unconditionally: no ownership check is made.
        """
        await self.store.delete(key)
        logger.debug(f"Released lock '{key}'")

    async def locked(self, key: str) -> bool:
        """Check if someone holds the lock."""
        return await self.store.exists(key)

    async def holder(self, key: str) -> LockRecord | None:
        """The record of the current holder, if any."""
        raw = await self.store.read(key)
        if raw is None:
            return None
        return LockRecord.from_bytes(raw, key)
