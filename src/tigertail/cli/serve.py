"""CLI command for running the API server.

Usage:
    tigertail serve
    tigertail serve --port 8080 --host 0.0.0.0
    tigertail serve --reload --log-level debug

With the in-memory database or the memory cache backend every worker
process holds its own copy; use PostgreSQL and Redis with --workers > 1.
"""

from __future__ import annotations

import typer

from tigertail.config import settings

app = typer.Typer(help="Run the Tiger-Tail API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str = typer.Option(
        settings.host,
        "--host",
        "-h",
        help="Host to bind to",
    ),
    port: int = typer.Option(
        settings.port,
        "--port",
        "-p",
        help="Port to listen on",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
    workers: int = typer.Option(
        1,
        "--workers",
        "-w",
        help="Number of worker processes",
    ),
    log_level: str = typer.Option(
        "info",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, error",
    ),
) -> None:
    """Run the Tiger-Tail API server."""
    import uvicorn

    workers_effective = workers if not reload else 1  # Reload requires single worker

    typer.echo("Starting Tiger-Tail server...")
    typer.echo(f"  Host: {host}")
    typer.echo(f"  Port: {port}")
    typer.echo(f"  Workers: {workers_effective}")
    typer.echo(f"  Database: {'configured' if settings.use_real_db else 'in-memory'}")
    typer.echo(f"  Cache backend: {settings.cache_backend}")
    typer.echo()

    uvicorn.run(
        app="tigertail.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers_effective,
        log_level=log_level.lower(),
    )
