"""Allow running as python -m tigertail."""

from tigertail.cli import main

main()
