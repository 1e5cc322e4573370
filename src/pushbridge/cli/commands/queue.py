"""Queue inspection commands."""

from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import click
import typer
from rich.markup import escape

from pushbridge.cli.console import console, dim, error, warning


def _format_countdown(due_at: datetime, now: datetime | None = None) -> str:
    """Format a countdown string until a message is due."""
    now = now or datetime.now(UTC)
    if due_at <= now:
        return "[green]now[/green]"

    total_seconds = int((due_at - now).total_seconds())
    if total_seconds < 60:
        return f"in {total_seconds}s"

    total_minutes = total_seconds // 60
    if total_minutes < 60:
        return f"in {total_minutes}m"

    hours, minutes = divmod(total_minutes, 60)
    if hours < 24:
        return f"in {hours}h {minutes}m" if minutes else f"in {hours}h"

    days, hours = divmod(hours, 24)
    return f"in {days}d {hours}h" if hours else f"in {days}d"


def register(app: typer.Typer) -> None:
    """Register the queue command."""

    @app.command()
    def queue(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: list"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Queue file (default: storage.path from config)",
            ),
        ] = None,
    ) -> None:
        """Inspect pending messages.

        Examples:
            pushbridge queue list                     # List pending messages
            pushbridge queue list --path db.json      # Read a specific queue file
        """
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        if action == "list":
            _queue_list(path or _configured_queue_path())
        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: list")
            raise typer.Exit(1)


def _configured_queue_path() -> Path:
    from pushbridge.config import ConfigError, load_config

    try:
        return load_config().storage.path.expanduser()
    except (ConfigError, FileNotFoundError) as e:
        error(f"Error loading config: {escape(str(e))}")
        raise typer.Exit(1) from None


def _queue_list(queue_file: Path) -> None:
    """List all pending messages, soonest first."""
    from rich.table import Table

    from pushbridge.queue import QueuePersistence

    messages = QueuePersistence(queue_file).load()
    if not messages:
        warning("No pending messages")
        return

    table = Table(show_header=True)
    table.add_column("Key", style="dim")
    table.add_column("Title")
    table.add_column("Message")
    table.add_column("Due")
    table.add_column("Fires")

    for message in sorted(messages.values(), key=lambda m: m.timestamp):
        text = message.message
        if len(text) > 40:
            text = text[:40] + "..."
        table.add_row(
            escape(message.key),
            escape(message.title) if message.title else "[dim]-[/dim]",
            escape(text),
            message.due_at.strftime("%Y-%m-%d %H:%M:%S"),
            _format_countdown(message.due_at),
        )

    console.print(table)
    dim(f"Total: {len(messages)} message(s)")
