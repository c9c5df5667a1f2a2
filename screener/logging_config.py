"""
Logging setup for the screener service.

Every module logs through ``logging.getLogger(__name__)``; this module only
attaches handlers to the ``screener`` parent logger so the output format and
level are decided in one place.
"""

import logging

from .config import Settings

LOGGER_NAME = "screener"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(settings: Settings) -> logging.Logger:
    """Set up logging configuration based on settings."""
    level = getattr(logging, settings.LOG_LEVEL)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear existing handlers so repeated app creation doesn't duplicate output
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if settings.LOG_FILE:
        try:
            file_handler = logging.FileHandler(settings.LOG_FILE, encoding='utf-8')
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Could not set up file logging: {e}")

    return logger

