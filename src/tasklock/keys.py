"""Lock key schema for task locks.

Key format: {prefix}:{task}:{identifier}

Where:
- prefix: "lock" (namespace shared by every task type)
- task: task type name, e.g. "Report"
- identifier: the task arguments joined by "-", e.g. "acct-1"

Empty components are dropped, so a task called without arguments locks
on "lock:Report".
"""

from __future__ import annotations

from typing import Any

from tasklock.config import settings


def default_identifier(*args: Any, separator: str | None = None) -> str | None:
    """Build an identifier from task arguments.

    Override per task when arguments are many, long, or do not convert
    cleanly to strings.
    """
    sep = settings.identifier_separator if separator is None else separator
    return sep.join(str(arg) for arg in args)


class LockKeys:
    """Lock key generator following a consistent naming convention."""

    PREFIX = settings.key_prefix
    SEPARATOR = settings.key_separator

    @classmethod
    def build(cls, task: str | None, identifier: str | None = None) -> str:
        """Key for one logical task instance."""
        parts = [cls.PREFIX, task, identifier]
        return cls.SEPARATOR.join(part for part in parts if part)

    @classmethod
    def for_args(cls, task: str, *args: Any) -> str:
        """Key for a task using the default identifier."""
        return cls.build(task, default_identifier(*args))

    @classmethod
    def parse_key(cls, key: str) -> dict[str, str] | None:
        """Parse a lock key into its components.

        Returns None if the key is outside the lock namespace.
        """
        parts = key.split(cls.SEPARATOR, 2)
        if len(parts) < 2 or parts[0] != cls.PREFIX:
            return None

        return {
            "prefix": parts[0],
            "task": parts[1],
            "identifier": parts[2] if len(parts) > 2 else "",
        }
