"""Server command for running the pushbridge service."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from pushbridge.cli.console import error

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    """Register the serve command."""

    @app.command()
    def serve(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        host: Annotated[
            str | None,
            typer.Option(
                "--host",
                "-h",
                help="Host to bind to (default: server.host from config)",
            ),
        ] = None,
        port: Annotated[
            int | None,
            typer.Option(
                "--port",
                "-p",
                help="Port to bind to (default: server.port from config)",
            ),
        ] = None,
    ) -> None:
        """Start the pushbridge server."""
        from pushbridge.config import ConfigError, load_config

        try:
            bridge_config = load_config(config)
            bridge_config.require_secrets()
        except (ConfigError, FileNotFoundError) as e:
            error(f"fatal: {escape(str(e))}")
            raise typer.Exit(1) from None

        if host is not None:
            bridge_config.server.host = host
        if port is not None:
            bridge_config.server.port = port

        try:
            asyncio.run(_run_server(bridge_config))
        except KeyboardInterrupt:
            # Use print here since logging may not be configured yet
            print("\nServer stopped")


async def _run_server(config) -> None:
    """Wire the queue, notifier and HTTP server together and serve."""
    from pushbridge.logging import configure_logging
    from pushbridge.notify import PushoverNotifier
    from pushbridge.queue import MessageStore, QueuePersistence, Scheduler
    from pushbridge.server import ServerRunner, create_app

    configure_logging(use_rich=True)

    logger.info("Loading message queue")
    store = MessageStore(
        QueuePersistence(config.storage.path.expanduser()),
        limits=config.limits.to_limits(),
    )

    notifier = PushoverNotifier(
        token=config.pushover.token.get_secret_value(),
        user=config.pushover.user.get_secret_value(),
        api_url=config.pushover.api_url,
        timeout=config.pushover.timeout,
    )
    scheduler = Scheduler(
        store,
        notifier,
        update_interval=config.scheduler.update_interval,
        drift_tolerance=config.scheduler.drift_tolerance,
    )

    app = create_app(
        scheduler,
        psk=config.server.psk.get_secret_value(),
        notifier=notifier,
    )
    runner = ServerRunner(app, host=config.server.host, port=config.server.port)
    await runner.run()
