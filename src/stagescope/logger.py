"""Logging configuration for Stagescope."""

import logging
import sys

# Create logger for Stagescope
logger = logging.getLogger("stagescope")


def setup_logger(level: int = logging.INFO) -> None:
    """Setup the Stagescope logger with default configuration.

    Args:
        level: Logging level (default: INFO)
    """
    if logger.handlers:
        # Already configured
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter("stagescope: %(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


# Initialize logger on import
setup_logger()
