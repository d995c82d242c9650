"""
Shared logger utility for the VeggieMarket catalog core.
Provides a consistent logger configuration for demos and entry points.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str | None = None, level: int | str | None = None) -> logging.Logger:
    """
    Returns a logger with the specified name, configured with a standard format.

    The level defaults to ``VEGGIEMARKET_LOG_LEVEL`` from the environment, or
    INFO. If no name is provided, returns the root logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)
    if level is None:
        level = os.getenv("VEGGIEMARKET_LOG_LEVEL", "INFO").upper()
    logger.setLevel(level)
    return logger
