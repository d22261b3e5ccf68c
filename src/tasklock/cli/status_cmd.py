"""CLI command for inspecting a task lock.

Usage:
    tasklock status Report acct-1
    tasklock status --key lock:Report:acct-1 --format json
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import TypedDict

import typer
from rich.console import Console

from tasklock.cli.common import resolve_key
from tasklock.errors import TaskLockError
from tasklock.execution import get_task_lock
from tasklock.keys import LockKeys
from tasklock.store.redis import close_redis


class LockStatus(TypedDict):
    key: str
    locked: bool
    lock_until: int | None
    pid: int | None
    expired: bool


async def _read_status(key: str) -> LockStatus:
    try:
        lock = await get_task_lock()
        holder = await lock.holder(key)
        if holder is None:
            return {"key": key, "locked": False, "lock_until": None, "pid": None, "expired": False}
        return {
            "key": key,
            "locked": True,
            "lock_until": holder.lock_until,
            "pid": holder.pid,
            "expired": holder.expired(lock.now()),
        }
    finally:
        await close_redis()


def status(
    task: str = typer.Argument(None, help="Task type name"),
    args: list[str] = typer.Argument(None, help="Task arguments"),
    key: str = typer.Option(None, "--key", "-k", help="Explicit lock key"),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text, json"),
) -> None:
    """Show whether a task lock is held, by whom and until when."""
    console = Console()
    lock_key = resolve_key(task, args, key)

    try:
        result = asyncio.run(_read_status(lock_key))
    except TaskLockError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2)

    if output_format == "json":
        typer.echo(json.dumps(result))
        return

    if not result["locked"]:
        console.print(f"[green]Unlocked:[/green] {lock_key}")
        return

    console.print(f"[yellow]Locked:[/yellow] {lock_key}")
    parts = LockKeys.parse_key(lock_key)
    if parts is not None:
        console.print(f"  Task:      {parts['task']}")
        if parts["identifier"]:
            console.print(f"  Arguments: {parts['identifier']}")
    console.print(f"  Owner pid: {result['pid']}")
    if result["lock_until"] == 0:
        console.print("  Expires:   never")
    else:
        until = datetime.fromtimestamp(result["lock_until"] or 0, tz=timezone.utc)
        console.print(f"  Expires:   {until.isoformat()}")
        if result["expired"]:
            console.print("  [red]Lease expired[/red]; next acquirer may steal it")
