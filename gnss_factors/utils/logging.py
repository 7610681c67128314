"""Logging helpers for the GNSS factor library."""

from __future__ import annotations

import logging

_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str = "gnss_factors", level: int | None = None) -> logging.Logger:
    """Return a named logger with a single stream handler attached.

    The level is only applied when given, so that applications embedding the
    library keep control over verbosity.
    """

    logger = logging.getLogger(name)
    root = logging.getLogger("gnss_factors")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    if level is not None:
        logger.setLevel(level)
    return logger
