"""Logging configuration.

Log records go to stderr; stdout carries only heart rate values.
"""

import logging
import sys

APP_LOGGER = "heart_rate"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure logging for the application.

    Args:
        level: Log level for the heart_rate loggers (DEBUG, INFO, WARNING, ...)

    Returns:
        The application logger
    """
    level_upper = level.upper()
    invalid_level = None if level_upper in VALID_LEVELS else level

    # Root stays at WARNING so bleak debug output is hidden
    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )

    app_logger = logging.getLogger(APP_LOGGER)
    app_logger.setLevel(logging.INFO if invalid_level else getattr(logging, level_upper))

    if invalid_level:
        app_logger.warning("Unknown log level '%s', defaulting to INFO", invalid_level)
    return app_logger
