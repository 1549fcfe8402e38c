"""Structured logging for template events (trigger, deliver, validate, process)."""

import logging
import os
import sys
from typing import Optional, Union


def get_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Return a configured logger; the handler is attached only once per name.

    Level defaults to the LOG_LEVEL environment variable, then INFO.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
            )
        )
        logger.addHandler(handler)
        if level is None:
            level = (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
        logger.setLevel(level)
    return logger
