"""Logging utilities."""

import logging
import sys
from typing import Optional, TextIO

from scenario_engine.errors import InvalidConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood DEBUG output during JIT compilation
_NOISY_LOGGERS = ("numba",)


def setup_logger(
    name: str = "scenario_engine",
    level: str = "INFO",
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Set up the engine logger with consistent formatting.
    
    Calling it again reconfigures the logger in place rather than
    stacking handlers.
    
    Args:
        name: Logger name; engine modules log under "scenario_engine.*"
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write logs to
        stream: Console stream (default: stderr, keeping stdout free for output)
    
    Returns:
        Configured logger
    
    Raises:
        InvalidConfig: If level is not a known level name
    """
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        raise InvalidConfig(f"Unknown log level: {level!r}")
    
    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)
    
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    
    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))
    
    return logger
