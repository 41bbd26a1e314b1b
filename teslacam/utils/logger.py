# teslacam/utils/logger.py
"""
Logging setup for the scanner and the API.

Everything goes to the console; unless LOG_DIR is set to "" it also goes to a
rotating teslacam.log (LOG_FILE_MAX_MB × LOG_FILE_BACKUPS). Setup runs once,
on the first get_logger() call.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from teslacam.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "teslacam.log"

# Client libraries that log every request at INFO/DEBUG
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "minio")

_DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs")
_configured = False


def resolve_log_dir(log_dir: Optional[str]) -> Optional[str]:
    """None → repo logs/ dir, "" → no file logging, anything else as given."""
    if log_dir is None:
        return _DEFAULT_LOG_DIR
    return log_dir or None


def configure_logging(level: Optional[str] = None, log_dir: Optional[str] = settings.LOG_DIR,
                      max_mb: int = settings.LOG_FILE_MAX_MB, backups: int = settings.LOG_FILE_BACKUPS):
    global _configured
    if _configured:
        return
    _configured = True

    level = (level or settings.LOG_LEVEL).upper()
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler()]

    directory = resolve_log_dir(log_dir)
    if directory:
        os.makedirs(directory, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=os.path.join(directory, LOG_FILE_NAME),
            maxBytes=max_mb * 1024 * 1024,
            backupCount=backups,
            encoding="utf-8",
        ))

    root = logging.getLogger()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    configure_logging()
    return logging.getLogger(name)
