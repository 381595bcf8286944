"""Logging configuration for the helmlet CLI."""

import logging
import sys

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """Attach a stderr handler to the ``helmlet`` logger.

    Safe to call more than once; existing handlers are replaced.
    """
    logger = logging.getLogger("helmlet")
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
