"""
Logging setup for csv-sniffer.

Core modules log through ``logging.getLogger(__name__)``; the service
configures the package logger once through ``get_logger``. Records still
propagate to the root logger so an embedding app (or pytest) sees them.
"""

from __future__ import annotations

import logging
import os
import sys

from .rules import LOG_LEVEL_ENV

PACKAGE_LOGGER = "csv_sniffer"


def _level_from_env() -> int:
    level = logging.getLevelName(os.getenv(LOG_LEVEL_ENV, "INFO").upper())
    # unknown names come back as "Level <name>"
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(_level_from_env())
    return logger
