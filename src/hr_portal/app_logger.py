from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "hr_portal"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("HR_PORTAL_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the package logger once; later calls only adjust the level."""

    resolved = _resolve_level(level)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(resolved)

    # Avoid duplicate console handlers
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(ch)

    for h in logger.handlers:
        h.setLevel(resolved)

    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    base = logging.getLogger(ROOT_LOGGER_NAME)
    if not name:
        return base
    if name.startswith(ROOT_LOGGER_NAME + "."):
        name = name[len(ROOT_LOGGER_NAME) + 1:]
    return base.getChild(name)
