"""Logging setup for the daemon."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO", stream: Optional[object] = None) -> logging.Logger:
    """Attach one stderr handler to the ``chatrelay`` logger.

    Safe to call more than once; the previous handler is replaced.
    """
    logger = logging.getLogger("chatrelay")
    for handler in list(logger.handlers):
        if getattr(handler, "_chatrelay", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._chatrelay = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger
