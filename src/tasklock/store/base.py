"""Base lock store interface.

Defines the atomic primitives the lock algorithm needs from a shared
key-value store. Each call must be atomic at the store level; no retries
or timeouts are layered on here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class LockStore(ABC):
    """Abstract base class for lock store backends."""

    # Backends that can replace a value only if it still matches an
    # expected value set this and implement compare_and_swap().
    supports_compare_and_swap: bool = False

    @abstractmethod
    async def create_if_absent(self, key: str, value: bytes) -> bool:
        """Store ``value`` under ``key`` unless the key exists.

        Returns:
            True if this call created the key
        """
        ...

    @abstractmethod
    async def read(self, key: str) -> bytes | None:
        """Return the value under ``key``, or None if absent."""
        ...

    @abstractmethod
    async def swap(self, key: str, value: bytes) -> bytes | None:
        """Unconditionally replace the value and return the previous one."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Deleting a missing key is not an error."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether ``key`` holds a value."""
        ...

    async def compare_and_swap(self, key: str, expected: bytes, value: bytes) -> bool:
        """Replace the value under ``key`` only if it equals ``expected``.

        Returns:
            True if the value was replaced
        """
        raise NotImplementedError(f"{type(self).__name__} does not support compare-and-swap")
