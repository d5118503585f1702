"""Logging setup for the repoinstall command line."""

import logging
import sys

LOGGER_NAME = "repoinstall"
LOG_FORMAT = "[repoinstall] %(levelname)s %(message)s"

_HANDLER_TAG = "_repoinstall_handler"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Safe to call repeatedly; an existing handler is reused and only the level
    is updated.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if debug else logging.INFO

    handler = next(
        (h for h in logger.handlers if getattr(h, _HANDLER_TAG, False)), None
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        setattr(handler, _HANDLER_TAG, True)
        logger.addHandler(handler)
    else:
        # stderr may have been swapped since the handler was created
        handler.stream = sys.stderr

    handler.setLevel(level)
    logger.setLevel(level)
    return logger


__all__ = ["LOGGER_NAME", "LOG_FORMAT", "setup_logging"]
