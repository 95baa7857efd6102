"""Logging setup"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Set up a console logger

    Args:
        name: logger name (usually ``__name__``)
        level: DEBUG, INFO, WARNING or ERROR. Falls back to CALSYNC_LOG_LEVEL,
            then INFO.

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    level = level or os.environ.get("CALSYNC_LOG_LEVEL")
    if level:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    else:
        logger.setLevel(logging.INFO)

    # drop handlers from a previous call so lines are not duplicated
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
