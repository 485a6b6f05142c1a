"""Single-sink logging setup: append to a file, or stdout when no file is usable."""

import logging
import sys
from typing import Optional

from .models import LoggingSettings

LOGGER_NAME = "dumpctl"
LOG_FORMAT = "[BACKUP] %(asctime)s %(filename)s:%(lineno)d: %(levelname)s %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


def _level(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def setup_logging(settings: Optional[LoggingSettings] = None) -> logging.Logger:
    """
    Configure the dumpctl logger and return it. Calling again replaces the handler.

    A log file that cannot be opened degrades to stdout with a warning; it never
    stops the process.
    """
    settings = settings or LoggingSettings()
    logger = get_logger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    fallback_reason = None
    handler: logging.Handler
    if settings.file_path:
        try:
            settings.file_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(settings.file_path, mode="a", encoding="utf-8")
        except OSError as e:
            fallback_reason = e
            handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_level(settings.level))
    logger.propagate = False

    if fallback_reason is not None:
        logger.warning("Failed to open log file, using stdout: %s", fallback_reason)
    return logger
