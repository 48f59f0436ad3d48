"""logging_config.py - Namespace Logger Setup

Modules log through :code:`logging.getLogger(__name__)` and never attach handlers.
Applications call :func:`setup_logging` once to route the :code:`space_tree` records
to the console and, optionally, to a file.
"""
from __future__ import annotations

import logging
import sys

from space_tree.config import LOGGER_NAME

__all__ = ['LOG_FORMAT', 'DATE_FORMAT', 'setup_logging']

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'

# %% Handlers
def _make_handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler

# %% Setup
def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> logging.Logger:
    """Routes the namespace logger to stdout and an optional log file

    Repeated calls replace the handlers of earlier ones.

    :param level: Threshold of the logger and its handlers
    :type level: int, optional

    :param log_file: Path of a log file, truncated on setup
    :type log_file: str | None, optional

    :return: Namespace logger
    :rtype: logging.Logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))

    for handler in handlers:
        logger.addHandler(_make_handler(handler, level))

    logger.debug("Logging to %d handler(s) at level %s.",
                 len(handlers), logging.getLevelName(level))
    return logger
