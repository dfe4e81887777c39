"""Logging setup and environment configuration."""

import logging
import os
from typing import Optional

DEBUG_ENV = "RIG_DEBUG"

logger = logging.getLogger("rig_sdk")


def debug_enabled(value: Optional[str] = None) -> bool:
    """True when RIG_DEBUG (or ``value``) is 1, true or yes."""
    if value is None:
        value = os.getenv(DEBUG_ENV, "")
    return value.strip().lower() in ("1", "true", "yes")


def configure_logging(debug: Optional[bool] = None) -> logging.Logger:
    """Set the SDK logger level from RIG_DEBUG unless ``debug`` is given.

    Handlers are left to pytest or the application; propagation stays on.
    """
    if debug is None:
        debug = debug_enabled()
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = True
    return logger
