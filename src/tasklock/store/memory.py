"""In-process lock store.

Holds lock records in a dict. Every primitive completes without awaiting,
so each call is atomic with respect to other coroutines on the same event
loop. Useful for tests and for coordinating tasks inside one process.
"""

from __future__ import annotations

from tasklock.store.base import LockStore


class MemoryLockStore(LockStore):
    """Dict-backed lock store."""

    def __init__(self, compare_and_swap: bool = True) -> None:
        self.supports_compare_and_swap = compare_and_swap
        self._data: dict[str, bytes] = {}

    async def create_if_absent(self, key: str, value: bytes) -> bool:
        if key in self._data:
            return False
        self._data[key] = value
        return True

    async def read(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def swap(self, key: str, value: bytes) -> bytes | None:
        previous = self._data.get(key)
        self._data[key] = value
        return previous

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        return key in self._data

    async def compare_and_swap(self, key: str, expected: bytes, value: bytes) -> bool:
        if not self.supports_compare_and_swap:
            return await super().compare_and_swap(key, expected, value)
        if self._data.get(key) != expected:
            return False
        self._data[key] = value
        return True

    def keys(self) -> list[str]:
        """Keys currently held."""
        return list(self._data)
