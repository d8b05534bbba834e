"""Logging utilities."""
import logging
import sys
from typing import Optional, Union

from ..config import settings


def setup_logger(
    name: str = "apprtc-client", level: Optional[Union[int, str]] = None
) -> logging.Logger:
    """Set up and configure a logger.

    Args:
        name: Logger name
        level: Logging level (defaults to settings.log_level)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        level = settings.log_level.upper()

    logger.setLevel(level)

    # Check if logger already has handlers
    if not logger.handlers:
        # Signaling output goes to stdout in the CLI, keep logs on stderr
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)

        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)

    return logger


# Global logger instance
logger = setup_logger()
