"""CLI command for force-releasing a task lock.

Usage:
    tasklock release Report acct-1
    tasklock release --key lock:Report:acct-1 --yes
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from tasklock.cli.common import resolve_key
from tasklock.errors import TaskLockError
from tasklock.execution import get_task_lock
from tasklock.store.redis import close_redis


async def _release(key: str) -> bool:
    try:
        lock = await get_task_lock()
        if not await lock.locked(key):
            return False
        await lock.release(key)
        return True
    finally:
        await close_redis()


def release(
    task: str = typer.Argument(None, help="Task type name"),
    args: list[str] = typer.Argument(None, help="Task arguments"),
    key: str = typer.Option(None, "--key", "-k", help="Explicit lock key"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a task lock regardless of who holds it."""
    console = Console()
    lock_key = resolve_key(task, args, key)

    if not yes:
        typer.confirm(f"Release '{lock_key}' regardless of its holder?", abort=True)

    try:
        released = asyncio.run(_release(lock_key))
    except TaskLockError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=2)

    if released:
        console.print(f"[green]Released:[/green] {lock_key}")
    else:
        console.print(f"[yellow]Not locked:[/yellow] {lock_key}")
