"""
Logging for Evolution Insight.

Only the ``evolution_insight`` logger tree is configured, so embedding the
analysis in another program leaves that program's root logger alone. Records
go to stderr through rich; the HTTP client libraries are held at WARNING
unless the run is verbose, since they log every GitHub request at INFO.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "evolution_insight"

VERBOSITY_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}

# Loggers of the HTTP stack used by the GitHub collaborator.
HTTP_LOGGERS = ("httpx", "httpcore")

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(
    verbosity: str = "normal",
    log_file: Optional[str] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Attach rich (and optionally file) handlers to the package logger.

    Calling this again replaces the handlers from the previous call.

    Args:
        verbosity: One of ``quiet``, ``normal`` or ``verbose``
        log_file: Optional path that receives plain-text records as well
        console: Console to render to (default: a new stderr console)

    Returns:
        The configured ``evolution_insight`` logger
    """
    try:
        level = VERBOSITY_LEVELS[verbosity]
    except KeyError:
        raise ValueError(f"unknown verbosity {verbosity!r}") from None
    verbose = verbosity == "verbose"

    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(
        RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_path=verbose,
        )
    )
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.setLevel(level)
    logger.propagate = False

    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``evolution_insight`` tree, e.g. for ``__name__``."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
