"""Console utilities for Todoist CLI."""

from functools import lru_cache

from rich.console import Console


@lru_cache(maxsize=2)
def get_console(stderr: bool = False) -> Console:
    """Get a shared Rich Console; ``stderr=True`` for diagnostics."""
    return Console(stderr=stderr, highlight=False)
