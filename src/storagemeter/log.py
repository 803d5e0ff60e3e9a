"""Logging setup for storagemeter."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "storagemeter"


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Route package logs through rich on stderr. Safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=verbose,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger
