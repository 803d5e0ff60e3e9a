"""Tests for logging setup."""

import logging
from io import StringIO

from rich.console import Console
from rich.logging import RichHandler

from storagemeter.log import LOGGER_NAME, setup_logging


class TestSetupLogging:
    def test_default_level(self):
        logger = setup_logging()
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.WARNING

    def test_verbose(self):
        assert setup_logging(verbose=True).level == logging.DEBUG

    def test_single_handler_after_repeated_calls(self):
        setup_logging()
        logger = setup_logging()
        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1

    def test_module_loggers_propagate(self):
        buffer = StringIO()
        setup_logging(console=Console(file=buffer, width=120))
        logging.getLogger("storagemeter.probe").warning("Could not measure /x")
        assert "Could not measure /x" in buffer.getvalue()
