"""Console output and logging configuration."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()
stderr_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure logging with a Rich handler and return the package logger."""
    level = logging.DEBUG if verbose else logging.WARNING

    handler = RichHandler(
        console=stderr_console,
        markup=False,
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level)

    logger = logging.getLogger("quicknote")
    logger.handlers.clear()
    logger.setLevel(level)
    logger.addHandler(handler)

    return logger
