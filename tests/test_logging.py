"""Tests for logger setup."""
import io
import logging

import pytest

from scenario_engine.errors import InvalidConfig
from scenario_engine.utils.logging import setup_logger


def test_engine_modules_log_through_configured_logger():
    stream = io.StringIO()
    setup_logger("scenario_engine.test_logging", "DEBUG", stream=stream)
    logging.getLogger("scenario_engine.test_logging.child").warning("runway short")
    assert "runway short" in stream.getvalue()
    assert "WARNING" in stream.getvalue()


def test_reconfiguring_replaces_handlers():
    setup_logger("scenario_engine.test_reconfigure", "INFO", stream=io.StringIO())
    logger = setup_logger("scenario_engine.test_reconfigure", "ERROR", stream=io.StringIO())
    assert len(logger.handlers) == 1
    assert logger.level == logging.ERROR


def test_unknown_level_raises():
    with pytest.raises(InvalidConfig):
        setup_logger("scenario_engine.test_bad_level", "LOUD")
