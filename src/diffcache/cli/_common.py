"""Shared utilities for the CLI command modules."""

from __future__ import annotations

import logging

from rich.console import Console

console = Console()
logger = logging.getLogger("diffcache.cli")


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr in the runner's plain line format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
