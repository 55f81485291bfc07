"""
Logging setup for ReplRepo.

All modules log through the shared loguru ``logger``; this module only
configures where it goes.
"""

import sys

from loguru import logger

from replrepo.config import LOG_LEVEL
from replrepo.config.config import VALID_LOG_LEVELS


def setup_logging(level: str = None):
    """
    Replace loguru's default sink with a single stderr sink.

    Unknown levels fall back to INFO so startup can still report them
    through ``validate_config``.
    """
    level = (level or LOG_LEVEL).upper()
    if level not in VALID_LOG_LEVELS:
        level = "INFO"
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}",
    )
    return logger
