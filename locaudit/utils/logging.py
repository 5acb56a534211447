"""Logging helpers for the location audit."""

from __future__ import annotations

import logging


def get_logger(name: str = "locaudit", level: int | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    root = logging.getLogger("locaudit")
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    if level is not None:
        logger.setLevel(level)
    return logger
