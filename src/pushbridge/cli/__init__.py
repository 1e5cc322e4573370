"""Command-line interface."""

from pushbridge.cli.app import app, main

__all__ = ["app", "main"]
