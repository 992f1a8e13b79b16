"""Background work for Tiger-Tail.

Cache maintenance triggered by reads and writes runs here, off the
request path.
"""

from tigertail.jobs.runner import BackgroundRunner, get_runner, stop_runner

__all__ = [
    "BackgroundRunner",
    "get_runner",
    "stop_runner",
]
