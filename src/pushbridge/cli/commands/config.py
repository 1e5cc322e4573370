"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import click
import typer
from rich.markup import escape

from pushbridge.cli.console import console, error, success


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        action: Annotated[
            str | None,
            typer.Argument(help="Action: show, validate"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $PUSHBRIDGE_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Manage configuration."""
        if action is None:
            ctx = click.get_current_context()
            click.echo(ctx.get_help())
            raise typer.Exit(0)

        from rich.syntax import Syntax
        from rich.table import Table

        from pushbridge.config import ConfigError, load_config
        from pushbridge.config.paths import get_config_path

        expanded_path = path.expanduser() if path else get_config_path()

        if action == "show":
            if not expanded_path.exists():
                error(f"Config file not found: {expanded_path}")
                raise typer.Exit(1)

            content = expanded_path.read_text()
            syntax = Syntax(content, "toml", theme="monokai", line_numbers=True)
            console.print(f"[bold]Config file: {expanded_path}[/bold]\n")
            console.print(syntax)

        elif action == "validate":
            try:
                config_obj = load_config(expanded_path)
            except FileNotFoundError as e:
                error(f"File not found: {escape(str(e))}")
                raise typer.Exit(1) from None
            except ConfigError as e:
                error(f"Configuration validation failed: {escape(str(e))}")
                raise typer.Exit(1) from None

            def configured(value) -> str:
                return "configured" if value else "[yellow]missing[/yellow]"

            table = Table(title="Configuration Summary")
            table.add_column("Setting", style="cyan")
            table.add_column("Value", style="green")
            table.add_row(
                "Server", f"{config_obj.server.host}:{config_obj.server.port}"
            )
            table.add_row("PSK", configured(config_obj.server.psk))
            table.add_row("Pushover token", configured(config_obj.pushover.token))
            table.add_row("Pushover user", configured(config_obj.pushover.user))
            table.add_row("Queue file", str(config_obj.storage.path))
            table.add_row(
                "Update interval", f"{config_obj.scheduler.update_interval}s"
            )
            table.add_row(
                "Drift tolerance", f"{config_obj.scheduler.drift_tolerance}s"
            )

            success("Configuration is valid!")
            console.print()
            console.print(table)

        else:
            error(f"Unknown action: {action}")
            console.print("Valid actions: show, validate")
            raise typer.Exit(1)
