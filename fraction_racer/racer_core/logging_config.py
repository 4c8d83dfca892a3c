"""Logging configuration for Fraction Racer."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None, name: str = "fraction_racer") -> logging.Logger:
    """
    Set up console logging for the package.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Defaults to WARNING.
        name: Logger to configure.

    Returns:
        Configured logger instance
    """
    if level is None:
        level = "WARNING"

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)

    return logger
