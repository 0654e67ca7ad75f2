import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


PACKAGE_LOGGER = "facturier"

_LOG_FILE_NAME = "facturier.log"
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _resolve_level(level: Optional[int]) -> int:
    if level is not None:
        return level
    return logging.DEBUG if os.getenv("FACTURIER_DEBUG") == "1" else logging.INFO


def _file_handler(log_dir: Path, formatter: logging.Formatter) -> RotatingFileHandler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / _LOG_FILE_NAME,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: Optional[int] = None, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Attaches stdout and rotating-file handlers to the "facturier" logger only, so
    a host application keeps control of the root logger. Calling it again just
    updates the level. level overrides FACTURIER_DEBUG, log_dir overrides
    FACTURIER_LOG_DIR (default ./data/logs).
    """
    log_level = _resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    if getattr(logger, "_facturier_logging_configured", False):
        logger.setLevel(log_level)
        for handler in logger.handlers:
            handler.setLevel(log_level)
        return logger

    formatter = logging.Formatter(_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    file_handler = _file_handler(Path(log_dir or os.getenv("FACTURIER_LOG_DIR") or "./data/logs"), formatter)

    for handler in (stream_handler, file_handler):
        handler.setLevel(log_level)
        logger.addHandler(handler)
    logger.setLevel(log_level)
    logger.propagate = False
    logger._facturier_logging_configured = True
    return logger
