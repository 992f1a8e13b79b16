"""HTTP API for Tiger-Tail."""
