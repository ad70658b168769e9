"""Namespaced stdlib logging for the leasing API, services and console.

Every record is one line, ``event key=value ...``; ``kv`` renders the fields.
``LOG_LEVEL`` sets the level and ``LOG_FILE``, when set, adds a rotating file
next to the stream handler.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

NAMESPACE = "railease"
FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure_logging(namespace: str = NAMESPACE, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(namespace)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=FORMAT, datefmt=DATE_FORMAT)
    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    log_file = os.getenv("LOG_FILE")
    if log_file:
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel((level or os.getenv("LOG_LEVEL") or "INFO").upper())
    logger.propagate = False
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    base = configure_logging()
    if child:
        return base.getChild(child)
    return base


def kv(**fields: Any) -> str:
    """``key=value`` pairs in argument order; values with spaces are quoted."""

    parts = []
    for key, value in fields.items():
        text = "-" if value is None else str(value)
        if not text or any(ch.isspace() for ch in text):
            text = '"' + text.replace('"', '\\"') + '"'
        parts.append(f"{key}={text}")
    return " ".join(parts)
