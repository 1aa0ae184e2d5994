"""Logging configuration for the Transmission RPC client.

Applications embedding the client call ``setup_logging()`` once at
startup and then retrieve named loggers via ``get_logger(name)``. When
used as a library the client only creates loggers and never configures
handlers itself.

The level normally comes from the LOG_LEVEL environment value loaded by
``config_manager``. Logs always go to the console and, when a path is
given, to a rotating file as well.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str, log_file_path: Optional[str] = None) -> None:
    """Configure the root logger.

    Parameters
    ----------
    log_level: str
        The minimum severity level to emit (e.g. "DEBUG", "INFO").
    log_file_path: str, optional
        File where logs should also be written. Console only when omitted.

    Notes
    -----
    If the root logger already has handlers this function does nothing,
    so calling it more than once is harmless.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    if logging.getLogger().handlers:
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if log_file_path:
        parent = os.path.dirname(log_file_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        # 10MB per file, 5 backups
        file_handler = RotatingFileHandler(log_file_path, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers)


def get_logger(name: str) -> logging.Logger:
    """Retrieve a logger under the package namespace."""
    return logging.getLogger(f"transmission_sdk.{name}")
