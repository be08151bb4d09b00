# parkdesk/utils/logger.py
"""
Logging for the whole backend: console plus a rotating parkdesk.log.
Location, size and backup count come from settings (LOG_DIR,
LOG_FILE_MAX_MB, LOG_FILE_BACKUPS). HTTP client and SQL engine loggers
are held at WARNING unless LOG_LEVEL is DEBUG.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from parkdesk.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR or os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
LOG_FILE = os.path.join(LOG_DIR, "parkdesk.log")

# Store clients log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")

_configured = False


def _build_file_handler(fmt: logging.Formatter) -> RotatingFileHandler:
    os.makedirs(LOG_DIR, exist_ok=True)
    handler = RotatingFileHandler(
        filename=LOG_FILE,
        maxBytes=settings.LOG_FILE_MAX_MB * 1024 * 1024,
        backupCount=settings.LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(fmt)
    return handler


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    root.addHandler(console)
    root.addHandler(_build_file_handler(fmt))

    if LOG_LEVEL != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; the first call configures the root logger."""
    _configure_root_logger()
    return logging.getLogger(name)
