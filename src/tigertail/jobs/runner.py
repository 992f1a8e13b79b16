"""Tracked background tasks for best-effort cache maintenance.

Cache repopulation and invalidation run after the response is produced.
Instead of detached fire-and-forget work, every task is submitted through a
BackgroundRunner which:

- returns the asyncio.Task handle, so callers and tests can await settlement
- keeps the set of pending tasks, so shutdown can drain or cancel them
- logs failures; nothing raised by a background task reaches a client

Example:
    runner = BackgroundRunner()
    runner.submit(cache.set_listing(posts, total), name="set_listing")
    ...
    await runner.drain(timeout=1.0)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundRunner:
    """In-process runner for fire-and-track coroutines."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of tasks that have not settled yet."""
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, work: Coroutine[Any, Any, Any], name: str) -> asyncio.Task[None] | None:
        """Schedule a coroutine on the running loop without awaiting it.

        Must be called from within a running event loop. Once shutdown has
        started the work is closed unrun and dropped with a warning.

        Returns:
            The task handle, or None if the work was dropped.
        """
        if self._closed:
            work.close()
            logger.warning("Background runner is shut down; dropped %s", name)
            return None

        task = asyncio.create_task(self._run(work, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, work: Coroutine[Any, Any, Any], name: str) -> None:
        try:
            await work
        except asyncio.CancelledError:
            logger.debug("Background task %s cancelled", name)
            raise
        except Exception:
            # Background failures are logged only
            logger.exception("Background task %s failed", name)

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for every pending task, including ones submitted meanwhile.

        Returns:
            True if all tasks settled, False if the timeout elapsed first.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self._tasks:
            remaining = None if deadline is None else max(0.0, deadline - loop.time())
            _, pending = await asyncio.wait(set(self._tasks), timeout=remaining)
            if pending:
                return False
        return True

    async def cancel_all(self) -> int:
        """Cancel every pending task and wait for them to unwind.

        Returns:
            Number of tasks cancelled.
        """
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        return len(tasks)

    async def shutdown(self, grace: float = 5.0) -> None:
        """Stop accepting work, drain for up to grace seconds, cancel the rest."""
        self._closed = True
        if await self.drain(timeout=grace):
            logger.info("Background runner drained")
            return
        cancelled = await self.cancel_all()
        logger.warning("Background runner cancelled %d unfinished task(s)", cancelled)


_runner: BackgroundRunner | None = None


def get_runner() -> BackgroundRunner:
    """Get the singleton background runner."""
    global _runner
    if _runner is None:
        _runner = BackgroundRunner()
    return _runner


async def stop_runner(grace: float) -> None:
    """Shut down the singleton runner."""
    global _runner
    if _runner is None:
        return
    await _runner.shutdown(grace)
    _runner = None
