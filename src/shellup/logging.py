"""Logging configuration for shellup."""

from __future__ import annotations

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

# Console instances for stdout/stderr
console = Console()
err_console = Console(stderr=True)

Verbosity = Literal["quiet", "normal", "verbose"]


def setup_logging(verbosity: Verbosity = "normal") -> logging.Logger:
    """Configure logging based on verbosity level.

    Deferred-phase failures are logged at DEBUG, so they only surface with
    ``verbose``.
    """
    logger = logging.getLogger("shellup")

    # Clear existing handlers (reload-profile calls this again)
    logger.handlers.clear()

    level_map = {
        "quiet": logging.ERROR,
        "normal": logging.WARNING,
        "verbose": logging.DEBUG,
    }
    logger.setLevel(level_map[verbosity])

    handler = RichHandler(
        console=err_console,
        show_time=verbosity == "verbose",
        show_path=verbosity == "verbose",
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message to stderr."""
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    """Print a success message to stdout."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an info message to stdout."""
    console.print(message)
