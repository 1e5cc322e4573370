"""Main CLI application."""

import typer

from pushbridge.cli.commands import config, queue, serve

app = typer.Typer(
    name="pushbridge",
    help="pushbridge - delayed Pushover notifications",
    no_args_is_help=True,
)

serve.register(app)
queue.register(app)
config.register(app)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
