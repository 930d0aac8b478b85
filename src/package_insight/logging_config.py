"""
Logging configuration for Package Insight.

Probe warnings (missing files, failed npm/git commands) go to stderr through
a rich handler so they never mix with the summary printed on stdout. A log
file, when configured, receives the same records with timestamps.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "package_insight"

# AnalysisConfig.verbosity -> level
LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbosity: str = "normal", log_file: Optional[str] = None) -> logging.Logger:
    """
    Route package logs to a rich stderr handler (and optionally a file).

    Args:
        verbosity: ``quiet``, ``normal`` or ``verbose``
        log_file: Path appended to with every record at the chosen level

    Returns:
        The ``package_insight`` logger

    Raises:
        ValueError: If ``verbosity`` is unknown
    """
    if verbosity not in LEVELS:
        raise ValueError(f"unknown verbosity '{verbosity}'")
    level = LEVELS[verbosity]
    verbose = verbosity == "verbose"

    handlers = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=verbose,
            show_path=verbose,
        )
    ]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    # force=True replaces handlers left by an earlier call in the same process
    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for ``name``, placed under the ``package_insight`` hierarchy."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
