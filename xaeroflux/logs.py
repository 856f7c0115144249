"""Logging set-up shared by the whole package."""

from __future__ import annotations

import functools
import logging
import sys
import time

TRACE = 5
"""Numeric level for trace messages, below ``logging.DEBUG``."""

LOGGER_NAME = "xaeroflux"

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_FORMAT = (
    "%(asctime)s %(levelname)s [%(threadName)s] %(name)s "
    "%(filename)s:%(lineno)d: %(message)s"
)


def default_log_level() -> str:
    """Return the level name used when logging is initialised."""
    return "trace"


@functools.cache
def init_logging() -> logging.Logger:
    """Configure the package logger once and return it.

    Later calls return the same logger without adding handlers again.
    """
    logging.addLevelName(TRACE, "TRACE")

    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")
    formatter.converter = time.gmtime

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_LEVELS[default_log_level()])
    logger.addHandler(handler)
    logger.propagate = False
    logger.log(TRACE, "Logging initialized")
    return logger