"""CLI commands for Tiger-Tail.

Provides command-line interface using Typer:
- tigertail serve: Run the API server
- tigertail flush-cache: Remove every entry from the configured cache backend

Usage:
    tigertail --help
    tigertail serve --port 8080
    tigertail flush-cache --yes
"""

import typer

from tigertail.cli.cache_cmd import app as cache_app
from tigertail.cli.serve import app as serve_app

# Main CLI application
app = typer.Typer(
    name="tigertail",
    help="Tiger-Tail: microblog feed API",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(cache_app, name="flush-cache")


@app.callback()
def callback() -> None:
    """Tiger-Tail: microblog feed API."""


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
