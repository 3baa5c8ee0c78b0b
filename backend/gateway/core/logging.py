"""Logging setup for the gateway process."""

import logging
import sys

LOG_FORMAT = '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","msg":"%(message)s"}'


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the ``gateway`` logger hierarchy.

    Installs a single stream handler writing one JSON-shaped line per record.
    Calling it again replaces the handler instead of stacking a new one.

    Args:
        level: Log level name

    Returns:
        The configured ``gateway`` logger
    """
    logger = logging.getLogger("gateway")
    logger.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers = [handler]
    logger.propagate = False
    return logger
