"""
console.py

Responsibility: Operator-facing output formats and logging configuration.

Formatted lines (title, comment, error, warning, success) are printed through a
shared rich `Console`. Diagnostics go through the standard `logging` tree rooted
at the `wpscaffold` logger.
"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_LOGGER_NAME = "wpscaffold"


def make_console(*, stderr: bool = False) -> Console:
    return Console(stderr=stderr, highlight=False)


def title(message: str) -> str:
    return f"[bold]{message}[/bold]"


def comment(message: str) -> str:
    return f"[italic yellow]{message}[/italic yellow]"


def error(message: str) -> str:
    return f"[bold red]{message}[/bold red]"


def warning(message: str) -> str:
    return f"[yellow]{message}[/yellow]"


def success(message: str) -> str:
    return f"[bold green]{message}[/bold green]"


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Configure the `wpscaffold` logger for one CLI invocation and return it.

    Without a log file, records go to stderr through rich (WARNING and above,
    DEBUG when verbose). With a log file, the file is truncated so each run has
    an isolated history.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    _close_handlers(logger)

    level = logging.DEBUG if verbose else logging.WARNING
    handler: logging.Handler
    if log_file is not None:
        log_path = log_file.expanduser().resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        level = logging.DEBUG if verbose else logging.INFO
    else:
        handler = RichHandler(console=make_console(stderr=True), show_path=False)

    logger.setLevel(level)
    handler.setLevel(level)
    logger.propagate = False
    logger.addHandler(handler)
    return logger
