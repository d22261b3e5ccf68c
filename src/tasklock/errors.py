"""Error kinds raised by the task lock.

Lock contention and a lock expiring before release are expected outcomes,
reported through ``LockResult`` and the task callbacks. The exceptions here
cover the cases where the lock state cannot be determined safely.
"""

from __future__ import annotations


class TaskLockError(Exception):
    """Base class for task lock failures."""


class StoreUnavailable(TaskLockError):
    """A call to the shared key-value store failed or timed out.

    Never treated as "denied" or "acquired": the caller decides what to do.
    """

    def __init__(self, operation: str, key: str, reason: str = ""):
        self.operation = operation
        self.key = key
        self.reason = reason
        message = f"Store {operation} failed for '{key}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DecodeError(TaskLockError):
    """Stored bytes under a lock key do not parse as a lock record."""

    def __init__(self, key: str, raw: bytes | str | None, reason: str = ""):
        self.key = key
        self.raw = raw
        self.reason = reason
        super().__init__(f"Cannot decode lock record at '{key}': {reason or 'invalid shape'}")


class LivenessProbeError(TaskLockError):
    """The process liveness probe itself failed."""

    def __init__(self, pid: int, reason: str = ""):
        self.pid = pid
        self.reason = reason
        super().__init__(f"Liveness probe failed for pid {pid}: {reason}")
