"""Shared helpers for CLI commands."""

from __future__ import annotations

import typer

from tasklock.keys import LockKeys


def resolve_key(task: str | None, args: list[str] | None, key: str | None) -> str:
    """Lock key from an explicit --key or from task name and arguments."""
    if key:
        return key
    if not task:
        raise typer.BadParameter("Give a task name or --key")
    return LockKeys.for_args(task, *(args or []))
