"""API routers for Tiger-Tail."""
