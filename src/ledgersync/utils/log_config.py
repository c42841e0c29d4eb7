"""Logging configuration for the command line."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class CLIHandler(logging.StreamHandler):
    """Stderr handler installed by the command line."""


def setup_logging(level: str = "WARNING") -> logging.Handler:
    """Configure the root logger to write to stderr.

    Args:
        level: Log level name ('DEBUG', 'INFO', 'WARNING', 'ERROR')

    Returns:
        The installed handler, so callers can remove it again
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handler = CLIHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # Repeated CLI invocations in one process must not stack handlers
    for existing in list(root_logger.handlers):
        if isinstance(existing, CLIHandler):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    return handler
