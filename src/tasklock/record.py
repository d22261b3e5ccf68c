"""Lock record stored under a lock key."""

from __future__ import annotations

from dataclasses import dataclass

import orjson

from tasklock.errors import DecodeError


@dataclass(frozen=True)
class LockRecord:
    """Who holds a lock and until when.

    ``lock_until`` is epoch seconds; 0 means the lock never expires.
    """

    lock_until: int
    pid: int

    @property
    def indefinite(self) -> bool:
        return self.lock_until == 0

    def expired(self, now: int) -> bool:
        """True if the lease ran out before ``now``."""
        return not self.indefinite and self.lock_until < now

    def to_bytes(self) -> bytes:
        """Serialize to JSON bytes."""
        return orjson.dumps({"lock_until": self.lock_until, "pid": self.pid})

    @classmethod
    def from_bytes(cls, data: bytes | str, key: str = "") -> LockRecord:
        """Deserialize from JSON bytes.

        Raises:
            DecodeError: If the bytes are not a record with integer
                ``lock_until`` and ``pid`` fields.
        """
        try:
            parsed = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise DecodeError(key, data, str(e)) from e

        if not isinstance(parsed, dict):
            raise DecodeError(key, data, "expected an object")

        lock_until = parsed.get("lock_until")
        pid = parsed.get("pid")
        for field_name, value in (("lock_until", lock_until), ("pid", pid)):
            # bool is an int subclass but never a valid field value
            if not isinstance(value, int) or isinstance(value, bool):
                raise DecodeError(key, data, f"'{field_name}' must be an integer")

        return cls(lock_until=lock_until, pid=pid)  # type: ignore[arg-type]
