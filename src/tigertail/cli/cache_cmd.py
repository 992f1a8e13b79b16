"""CLI command for clearing the cache.

Usage:
    tigertail flush-cache
    tigertail flush-cache --backend redis --yes
"""

from __future__ import annotations

import asyncio

import typer

from tigertail.cache.backend import CacheBackendError
from tigertail.cache.factory import create_cache_backend

app = typer.Typer(help="Remove every entry from the cache backend")


async def _flush(kind: str) -> None:
    backend = await create_cache_backend(kind)
    try:
        await backend.flush_all()
    finally:
        await backend.close()


@app.callback(invoke_without_command=True)
def flush_cache(
    backend: str = typer.Option(
        "redis",
        "--backend",
        "-b",
        help="Cache backend to flush (redis)",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation",
    ),
) -> None:
    """Flush the cache. The feed is re-read from the database afterwards.

    Only a shared backend can be flushed from here; the memory cache lives
    inside the server process and is cleared by restarting it.
    """
    if backend == "memory":
        typer.echo(
            "Error: the memory cache is private to the server process; "
            "restart the server to clear it",
            err=True,
        )
        raise typer.Exit(code=2)
    if not yes:
        typer.confirm(f"Flush every key in the {backend} cache?", abort=True)

    try:
        asyncio.run(_flush(backend))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)
    except CacheBackendError as e:
        typer.echo(f"Error: could not flush cache: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Flushed {backend} cache")
