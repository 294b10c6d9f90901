"""Centralized logging configuration for agentweave."""

import logging
import sys

from .config import get_settings


def setup_logging(level: str | None = None, name: str = "agentweave") -> logging.Logger:
    """Set up console logging for the package logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to settings.
        name: Logger name

    Returns:
        Configured logger

    """
    level = level or get_settings().effective_log_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(log_level)
        return logger

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
