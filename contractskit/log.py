"""Logging setup for contractskit command-line use.

The library itself only creates module loggers; handlers are attached
here, by the CLI or by an application that wants contractskit's format.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import get_config

LOGGER_NAME = "contractskit"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: Optional[Dict[str, Any]] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Attach console (stderr) and optional rotating-file handlers to the
    package logger. Calling it again replaces the handlers.
    """
    log_config = (config or get_config())["logging"]
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, (level or log_config["level"]).upper(), logging.INFO))

    if logger.handlers:
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_config.get("file"):
        log_path = Path(log_config["file"])
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=log_config["max_bytes"],
            backupCount=log_config["backup_count"],
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger
