"""Logging configuration for cfst."""

import logging
import os
import sys


def configure_logging() -> None:
    """Configure application-wide logging.

    Respects CFST_LOG_LEVEL environment variable (default: WARNING, so that
    progress bars and the result table stay readable).
    Logs to stderr with timestamp, level, module name, and message.

    Environment Variables:
        CFST_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
                        Default is WARNING.

    Examples:
        # Default WARNING level
        $ python -m cfst

        # Debug level to see every connection attempt
        $ CFST_LOG_LEVEL=DEBUG python -m cfst
    """
    log_level_str = os.environ.get("CFST_LOG_LEVEL", "WARNING").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    log_level = log_level_map.get(log_level_str, logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,  # Override any existing configuration
    )

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured: level=%s", logging.getLevelName(log_level))
