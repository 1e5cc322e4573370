"""CLI command modules."""

from pushbridge.cli.commands import config, queue, serve

__all__ = [
    "config",
    "queue",
    "serve",
]
