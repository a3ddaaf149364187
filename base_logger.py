# SPDX-License-Identifier: GPL-3.0-only
"""Base logger module."""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str = None) -> logging.Logger:
    """Return a logger with the shared handler and level configured.

    Args:
        name: Logger name, usually ``__name__`` of the calling module.

    Returns:
        Configured logger instance.
    """
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
