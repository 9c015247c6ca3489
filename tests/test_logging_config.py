"""Tests for logging setup."""

import logging

import pytest
from rich.logging import RichHandler

from analysis_ledger.logging_config import ROOT_LOGGER, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_ledger_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


class TestSetupLogging:
    def test_default_level_is_warning(self):
        logger = setup_logging()
        assert logger.name == ROOT_LOGGER
        assert logger.level == logging.WARNING

    @pytest.mark.parametrize(
        "verbose,quiet,expected",
        [(True, False, logging.DEBUG), (False, True, logging.ERROR), (True, True, logging.ERROR)],
    )
    def test_levels(self, verbose, quiet, expected):
        assert setup_logging(verbose=verbose, quiet=quiet).level == expected

    def test_repeated_calls_keep_one_console_handler(self):
        setup_logging()
        logger = setup_logging(verbose=True)
        assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1

    def test_log_file_receives_debug_records(self, tmp_path):
        path = tmp_path / "ledger.log"
        logger = setup_logging(quiet=True, log_file=str(path))
        get_logger("analysis_ledger.services.test").debug("analysis %d started", 7)
        for handler in logger.handlers:
            handler.flush()
        text = path.read_text(encoding="utf-8")
        assert "analysis 7 started" in text
        assert "analysis_ledger.services.test" in text


class TestGetLogger:
    def test_namespaces_foreign_names(self):
        assert get_logger("services").name == "analysis_ledger.services"

    def test_keeps_ledger_names(self):
        assert get_logger("analysis_ledger.persistence.database").name == "analysis_ledger.persistence.database"

    def test_root(self):
        assert get_logger().name == ROOT_LOGGER
