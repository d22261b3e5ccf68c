"""CLI commands for task locks.

Provides command-line interface using Typer:
- tasklock status: Show who holds a task lock
- tasklock release: Force-release a task lock

Usage:
    tasklock --help
    tasklock status Report acct-1
    tasklock release Report acct-1 --yes
    tasklock status --key lock:Report:acct-1
"""

import typer

from tasklock.cli.release_cmd import release
from tasklock.cli.status_cmd import status
from tasklock.config import settings
from tasklock.observability.logging import configure_logging

# Main CLI application
app = typer.Typer(
    name="tasklock",
    help="tasklock: inspect and manage distributed task locks",
    no_args_is_help=True,
)

app.command("status")(status)
app.command("release")(release)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log lock operations"),
) -> None:
    """tasklock: inspect and manage distributed task locks."""
    configure_logging(
        json_format=settings.log_json,
        level="DEBUG" if verbose else settings.log_level,
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
