"""
Logging configuration for Fathom.

Log records go to stderr through rich, so they never mix with the
readability report on stdout. The level follows the run's verbosity:

    verbosity 0    WARNING
    verbosity 1    INFO      one collection summary per run
    verbosity 2+   DEBUG     pipeline stages, skipped names, per-op trace
    quiet          ERROR
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def level_for(verbosity: int = 0, quiet: bool = False) -> int:
    if quiet:
        return logging.ERROR
    return VERBOSITY_LEVELS[min(max(verbosity, 0), len(VERBOSITY_LEVELS) - 1)]


def setup_logging(
    verbosity: int = 0, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Route fathom's log records to stderr, and optionally to a file.

    Args:
        verbosity: The run's verbosity (``-v`` count); see the module table
        quiet: Only log errors, whatever the verbosity
        log_file: Optional file path that also receives every record

    Returns:
        The ``fathom`` logger, set to the chosen level
    """
    level = level_for(verbosity, quiet)
    debugging = level <= logging.DEBUG

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=debugging,
            markup=False,
            show_time=debugging,
            show_path=debugging,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-7s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger("fathom")
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``name`` as a child of the ``fathom`` logger."""
    if name is None:
        return logging.getLogger("fathom")
    if not name.startswith("fathom"):
        name = f"fathom.{name}"
    return logging.getLogger(name)
