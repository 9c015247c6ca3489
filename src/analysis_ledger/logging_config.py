"""
Logging configuration for Analysis Ledger.

Every module logs through ``get_logger(__name__)``, which places it under
the ``analysis_ledger`` logger. ``setup_logging`` attaches a rich console
handler (and optionally a plain file handler) to that logger only, so
embedding applications keep control of the root logger.

Levels:
    quiet    ERROR and above
    default  WARNING and above (refused transitions, stale writes)
    verbose  DEBUG, including connection and bulk-write details
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "analysis_ledger"

_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _level_for(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the ``analysis_ledger`` logger.

    Safe to call repeatedly: handlers from an earlier call are replaced, so
    each CLI invocation gets exactly one console handler.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file to append records to, at DEBUG level

    Returns:
        The configured ``analysis_ledger`` logger
    """
    level = _level_for(verbose, quiet)
    logger = logging.getLogger(ROOT_LOGGER)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
        show_path=verbose,
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if log_file else level)
    logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the logger for *name*, namespaced under ``analysis_ledger``."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
